class ToolError(Exception):
    """Base for failures a tool reports back to the caller as text."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MalformedInput(ToolError):
    """A date/time (or other argument) could not be parsed."""

    default_message = "Could not understand that date or time."


class Conflict(ToolError):
    """The proposed booking overlaps an existing calendar event."""

    default_message = "That time overlaps an existing event."


class UpstreamUnavailable(ToolError):
    """A calendar, drive, mail or AI provider call failed."""

    default_message = "An external service is unavailable right now."
