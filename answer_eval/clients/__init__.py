from answer_eval.clients.factory import AdapterFactory, register_adapter
from answer_eval.clients.ports import Classifier, Evaluator, Extractor

__all__ = [
    "AdapterFactory",
    "register_adapter",
    "Extractor",
    "Classifier",
    "Evaluator",
]
