"""
Daily Guides

Read-only views derived from module state: the guided training session,
the remaining-macros diet guide, the meal plan and the strict-mode checklist.
"""

from typing import Dict, List, Optional, Any

from .domains import Domain, clamp, round_half_up
from .state import Meal, TrainingState, DietState


MEALS_PER_DAY = 4


def build_meal_plan(carb_target: int, protein_target: int, meals: int = MEALS_PER_DAY) -> List[Meal]:
    """
    Split daily targets into rice/chicken portions.

    Cooked rice is ~1.3 g per g of carbohydrate target,
    cooked chicken breast ~1.2 g per g of protein target.
    """
    rice = round_half_up(carb_target / meals * 1.3)
    chicken = round_half_up(protein_target / meals * 1.2)
    return [
        Meal(meal=index + 1, rice_grams=rice, chicken_grams=chicken)
        for index in range(meals)
    ]


def guided_session(training: TrainingState) -> List[str]:
    """Ordered directives for today's training session."""
    directives = [
        f"{ex.name}: {ex.sets}x{ex.reps} @ {ex.next_load or ex.load}kg, rest {ex.rest_seconds}s"
        for ex in training.exercises
    ]
    if training.deload_recommended:
        directives.append(
            f"Fatigue at {training.fatigue_index:.0f}. Deload: cut working sets by a third."
        )
    return directives


def diet_guide(diet: DietState, consumed: Optional[Dict[str, float]] = None) -> Dict[str, Any]:
    """Remaining macros for the day given what was already eaten."""
    consumed = consumed or {}
    calories = float(consumed.get("calories", 0))
    protein = float(consumed.get("protein", 0))
    carbs = float(consumed.get("carbs", 0))
    fat = float(consumed.get("fat", 0))

    overshoot = max(0.0, calories - diet.calorie_target)
    return {
        "calorie_target": diet.calorie_target,
        "calories_remaining": diet.calorie_target - calories,
        "protein_remaining": diet.protein_target - protein,
        "carbs_remaining": diet.carb_target - carbs,
        "fat_remaining": diet.fat_target - fat,
        "caloric_impact_score": round(clamp(diet.score - overshoot * 0.05), 2),
        "meal_plan": [
            {
                "meal": m.meal,
                "rice_grams": m.rice_grams,
                "chicken_grams": m.chicken_grams,
                "adjustment_margin_calories": m.adjustment_margin_calories,
            }
            for m in diet.meal_plan
        ],
    }


# Minimums enforced while strict mode is on
STRICT_MINIMUMS = {
    "study_hours": 2,
    "prayers": 1,
}


def strict_mode_view(
    training: TrainingState,
    diet: DietState,
    blocked: List[Domain]
) -> Dict[str, Any]:
    """The restricted daily checklist shown while strict mode is active."""
    return {
        "training_day": training.day_type.value,
        "calorie_target": diet.calorie_target,
        "minimum_study_hours": STRICT_MINIMUMS["study_hours"],
        "minimum_prayers": STRICT_MINIMUMS["prayers"],
        "blocked_domains": [d.value for d in blocked],
        "projections_hidden": True,
    }
