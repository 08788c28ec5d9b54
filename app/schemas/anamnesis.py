"""
GymTracker Pro - Anamnesis Schemas.

Onboarding health questionnaire answered once after registration.
"""

from typing import Optional

from pydantic import Field

from app.schemas.user import CamelModel


class AnamnesisAnswers(CamelModel):
    """
    Answers of the onboarding questionnaire.

    Personal data fields are free text as typed by the member; the remaining
    questions store the selected option value. The three acceptance terms
    must all be true before the answers can be submitted.
    """

    # Personal data
    full_name: str = ""
    birth_date: str = ""
    age: str = ""
    gender: str = ""
    height: str = ""
    current_weight: str = ""
    profession: str = ""
    marital_status: str = ""
    phone: str = ""
    email: str = ""

    # Goals and history
    main_goal: Optional[str] = None
    goal_deadline: Optional[str] = None
    trained_before: Optional[str] = None
    motivation: Optional[str] = None

    # Health
    diagnosed_disease: Optional[str] = None
    medical_follow_up: Optional[str] = None
    surgery: Optional[str] = None
    injuries: Optional[str] = None
    physical_limitation: Optional[str] = None
    continuous_medication: Optional[str] = None
    hormones_use: Optional[str] = None
    medical_clearance: Optional[str] = None

    # Habits
    meals_per_day: Optional[str] = None
    fast_food: Optional[str] = None
    water_intake: Optional[str] = None
    sleep_hours: Optional[str] = None
    stress_frequency: Optional[str] = None
    alcohol_frequency: Optional[str] = None

    # Availability
    days_per_week: Optional[str] = None
    time_per_workout: Optional[str] = None
    best_time: Optional[str] = None

    # Assessment
    recent_physical_assessment: Optional[str] = None
    recent_exams: Optional[str] = None
    accept_evolution_tracking: Optional[str] = None

    # Terms
    declare_truth: bool = Field(default=False)
    authorize_data_use: bool = Field(default=False)
    aware_of_health_changes: bool = Field(default=False)

    @property
    def terms_accepted(self) -> bool:
        return self.declare_truth and self.authorize_data_use and self.aware_of_health_changes
