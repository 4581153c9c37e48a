"""
GlideType Gestures Module

Tap/swipe classification, the recognition pipeline and its Qt worker.
"""
from .classifier import (
    GestureClassifier, GestureState, GestureSession,
    PathPoint, TapResult, SwipeResult,
)
from .pipeline import RecognitionPipeline, CandidateResponse, ResponseGate
from .worker import RecognitionWorker

__all__ = [
    'GestureClassifier',
    'GestureState',
    'GestureSession',
    'PathPoint',
    'TapResult',
    'SwipeResult',
    'RecognitionPipeline',
    'CandidateResponse',
    'ResponseGate',
    'RecognitionWorker',
]
