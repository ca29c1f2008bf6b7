from .lifecycle import (
    DEFAULT_SPRAYS_PER_MONTH,
    MAX_PLAN_MONTHS,
    PlanDescriptor,
    activate_plan,
    add_months,
    adjust_quota,
    find_usable_active_plan,
    parse_duration_months,
    purchase_plan,
    refresh_plan_active_flag,
    sprays_per_month,
)

__all__ = [
    "DEFAULT_SPRAYS_PER_MONTH",
    "MAX_PLAN_MONTHS",
    "PlanDescriptor",
    "activate_plan",
    "add_months",
    "adjust_quota",
    "find_usable_active_plan",
    "parse_duration_months",
    "purchase_plan",
    "refresh_plan_active_flag",
    "sprays_per_month",
]
