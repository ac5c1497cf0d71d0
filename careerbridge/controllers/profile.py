from typing import Any, Awaitable, Callable, Dict, List, Optional

from careerbridge.constants import FIELDS, LANGUAGE_LEVEL_LABELS, PROFILE_INCOMPLETE_HINT, VISA_TYPES
from careerbridge.models import CamelModel, Page, UserProfile
from careerbridge.services.navigation import is_profile_form_valid

EDITABLE_FIELDS = ("name", "field", "skills", "visa_type", "language_level", "preferences")


class Option(CamelModel):
    value: str
    label: str


class ProfileView(CamelModel):
    profile: UserProfile
    form_valid: bool
    hint: Optional[str]
    fields: List[str]
    visa_types: List[str]
    language_levels: List[Option]


class ProfileController:
    """Profile form. Every change goes back to the shell through ``on_update``."""

    def __init__(
        self,
        profile: UserProfile,
        on_update: Callable[[UserProfile], Awaitable[None]],
    ):
        self.profile = profile
        self.on_update = on_update

    @property
    def form_valid(self) -> bool:
        return is_profile_form_valid(self.profile)

    async def update(self, changes: Dict[str, Any]) -> UserProfile:
        """Apply field changes (snake_case or camelCase keys) and publish the new profile.

        Raises:
            ValueError: unknown field name
            pydantic.ValidationError: invalid value (e.g. unknown language level)
        """
        data = self.profile.model_dump()
        aliases = {UserProfile.model_fields[name].alias: name for name in EDITABLE_FIELDS}
        for key, value in changes.items():
            name = aliases.get(key, key)
            if name not in EDITABLE_FIELDS:
                raise ValueError(f"Unknown profile field: {key}")
            data[name] = value

        self.profile = UserProfile.model_validate(data)
        await self.on_update(self.profile)
        return self.profile

    def complete(self) -> Optional[Page]:
        """'Save & Enter Dashboard': the dashboard when the form is valid, otherwise None."""
        return Page.DASHBOARD if self.form_valid else None

    def view(self) -> ProfileView:
        return ProfileView(
            profile=self.profile,
            form_valid=self.form_valid,
            hint=None if self.form_valid else PROFILE_INCOMPLETE_HINT,
            fields=FIELDS,
            visa_types=VISA_TYPES,
            language_levels=[
                Option(value=level.value, label=label)
                for level, label in LANGUAGE_LEVEL_LABELS.items()
            ],
        )
