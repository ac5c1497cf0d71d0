from careerbridge.models import Page, UserProfile

UNGATED_PAGES = frozenset({Page.HOME, Page.PROFILE})


def is_profile_complete(profile: UserProfile) -> bool:
    return profile.name.strip() != ""


def is_profile_form_valid(profile: UserProfile) -> bool:
    """Stricter check used by the Profile page before entering the dashboard."""
    return (
        is_profile_complete(profile)
        and profile.field != ""
        and profile.visa_type != ""
    )


def resolve(requested: Page, profile: UserProfile) -> Page:
    """Return the page that actually renders for ``requested``.

    Home and Profile are always reachable; every other page redirects to Profile
    until the profile is complete.
    """
    if requested in UNGATED_PAGES:
        return requested
    if not is_profile_complete(profile):
        return Page.PROFILE
    return requested
