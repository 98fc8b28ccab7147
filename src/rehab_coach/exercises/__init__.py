"""
Exercise Logic Module
=====================
Contains pose evaluation logic for the prescribable exercise types.
"""

from .base import ExerciseType, AngleCalculator, EvaluationResult, BaseEvaluator
from .hand_raise import HandRaiseEvaluator
from .shoulder_abduction import ShoulderAbductionEvaluator
from .squat import SquatEvaluator

EVALUATORS = {
    ExerciseType.RIGHT_HAND_RAISE: HandRaiseEvaluator,
    ExerciseType.SHOULDER_ABDUCTION: ShoulderAbductionEvaluator,
    ExerciseType.SQUAT: SquatEvaluator,
}


def get_evaluator(exercise) -> BaseEvaluator:
    """Create the evaluator for an ExerciseType or display name."""
    return EVALUATORS[ExerciseType.from_name(exercise)]()


__all__ = [
    'ExerciseType',
    'AngleCalculator',
    'EvaluationResult',
    'BaseEvaluator',
    'HandRaiseEvaluator',
    'ShoulderAbductionEvaluator',
    'SquatEvaluator',
    'EVALUATORS',
    'get_evaluator',
]
