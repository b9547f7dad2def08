"""
Plain-text confirmation template.
"""

from ..services.ports import ConfirmationDetails


def render_confirmation(details: ConfirmationDetails) -> str:
    """Render the confirmation body sent to the visitor."""
    greeting = f"Hi {details.visitor_first_name}," if details.visitor_first_name else "Hi,"
    location = details.location_type or "Online"

    lines = [
        greeting,
        "",
        f"Your meeting with {details.business_name} is scheduled.",
        "",
        f"Date: {details.date}",
        f"Time: {details.meeting_time}",
        f"Duration: {details.duration_minutes} min",
        f"Location: {location} meeting",
    ]
    if details.meeting_url:
        lines.append(f"Join: {details.meeting_url}")
    lines.extend(["", f"- {details.business_name}"])

    return "\n".join(lines) + "\n"
