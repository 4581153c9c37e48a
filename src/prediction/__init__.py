"""
GlideType Prediction Module

Dictionary index and word recognition strategies for swipe gestures.
"""
from .dictionary import DictWord, DictionaryIndex, parse_frequencies
from .recognizer import Candidate, RecognitionRequest, Recognizer, KeySequenceRecognizer
from .templates import TemplateRecognizer
from .engine import PredictionEngine, Confidence, get_confidence

__all__ = [
    'DictWord',
    'DictionaryIndex',
    'parse_frequencies',
    'Candidate',
    'RecognitionRequest',
    'Recognizer',
    'KeySequenceRecognizer',
    'TemplateRecognizer',
    'PredictionEngine',
    'Confidence',
    'get_confidence',
]
