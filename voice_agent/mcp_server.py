"""MCP transport: exposes the agent tools over SSE (mounted by main.py under /mcp)."""

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from voice_agent.core.container import get_container
from voice_agent.services import tool_service

mcp = FastMCP("VoiceAgent")


@mcp.tool()
async def check_calendar_availability(
    date: str = Field(description="Day to check, YYYY-MM-DD (home time zone)"),
) -> str:
    """List busy events and free 30-minute slots within business hours for a day."""
    return await tool_service.check_calendar_availability(get_container(), date)


@mcp.tool()
async def book_appointment(
    title: str = Field(description="What the appointment is for"),
    dateTime: str = Field(description="Start time, e.g. 2024-03-01T10:30:00 (home time zone)"),
    attendeeEmail: str = Field(description="Guest email address"),
    durationMinutes: int | None = Field(default=None, description="Length in minutes (default 30)"),
) -> str:
    """Book an appointment on the calendar if the time is free."""
    return await tool_service.book_appointment(
        get_container(), title, dateTime, attendeeEmail, durationMinutes
    )


@mcp.tool()
async def search_knowledge_base(
    query: str = Field(description="Keywords to look for in the document library"),
) -> str:
    """Search the loaded documents and return the best matching excerpts."""
    return tool_service.search_knowledge_base(get_container(), query)


@mcp.tool()
async def generate_collateral(
    topic: str = Field(description="The topic (e.g. 'Refund Policy Summary')"),
    format: str = Field(description="Format (e.g. 'One-Pager', 'Memo')"),
    recipientEmail: str | None = Field(default=None, description="Where to email it if a Google Doc cannot be created"),
) -> str:
    """Write business collateral with AI and deliver it as a Google Doc, email or inline text."""
    return await tool_service.generate_collateral(get_container(), topic, format, recipientEmail)
