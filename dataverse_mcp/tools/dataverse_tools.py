# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/tools/dataverse_tools.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Dataverse MCP tools.

Each tool runs a Dataverse operation and turns the outcome into the text
returned to the agent. Failures are reported as text prefixed with
``[ERROR] `` so the agent can show them to the user.

Large query results and chart reports are not returned inline: they are
rendered by the client's LLM (MCP sampling) and published as resources.
The user is asked first (MCP elicitation) before a large query result is
turned into a resource.
"""

# Standard
from datetime import datetime
from importlib import resources
import logging
import random
from typing import Any, Callable, Dict, List, Optional, Protocol

# Third-Party
from mcp import types
import orjson
from pydantic import BaseModel, Field

# First-Party
from dataverse_mcp.config import Settings
from dataverse_mcp.services.dataverse_service import DataverseClient
from dataverse_mcp.services.publisher_service import ResourcePublisher

logger = logging.getLogger(__name__)

ERROR_PREFIX = "[ERROR] "
CHART_PLACEHOLDER = "[ChartJsCode]"

FIRST_NAMES = ["Alex", "Jordan", "Taylor", "Casey", "Riley", "Morgan", "Jamie", "Quinn", "Avery", "Drew"]
LAST_NAMES = ["Smith", "Johnson", "Brown", "Taylor", "Anderson", "Clark", "Lewis", "Walker", "Hall", "Young"]

MARKDOWN_TABLE_PROMPT = "The following is a result of a FetchXml query. Please format the result as a markdown table. Return only the markdown table, nothing else: {rows}"
CHART_PROMPT = (
    "A report should be generated in Chart.js that fulfills this requirement: {description}. "
    "I want you to create Chart.js code that replaces the '[ChartJsCode]' placeholder in this template: "
    "```const ctx = document.getElementById('myChart'); [ChartJsCode] new Chart(ctx, config);  ``` "
    "Only return the exact code, nothing else. The data that the report should be based on is the following: {rows}"
)
SAVE_AS_RESOURCE_SCHEMA = {
    "type": "object",
    "properties": {
        "createResource": {
            "type": "string",
            "title": "Save result to MCP resource?",
            "enum": ["Yes", "No"],
        }
    },
}


class ExecuteFetchRequest(BaseModel):
    """Arguments of ``execute_fetch``."""

    fetch_xml: str = Field(..., description="The FetchXml query.")
    query_description: str = Field(
        ...,
        description=(
            "A description of the expected result of the query in natural language in maximum 20 characters, "
            "which will be used to describe a resource containing the result. Example: 'The top 5 contacts, firstname and lastname.'"
        ),
    )


class CreateReportRequest(BaseModel):
    """Arguments of ``create_report``."""

    fetch_xml: str = Field(..., description="The FetchXml query. Should be kept simple, no aggregate functions!")
    report_description: str = Field(..., description="A description in natural language of the report that is to be created.")


class BulkCreateRandomContactsRequest(BaseModel):
    """Arguments of ``bulk_create_random_contacts``."""

    count: int = Field(..., description="Number of contacts to create (1-100).")


class ToolSession(Protocol):
    """The parts of an MCP ``ServerSession`` the tools use."""

    async def create_message(self, messages: List[types.SamplingMessage], *, max_tokens: int, **kwargs: Any) -> types.CreateMessageResult:
        """Ask the client's LLM for a completion."""

    async def elicit(self, message: str, requestedSchema: Dict[str, Any], **kwargs: Any) -> types.ElicitResult:
        """Ask the user for structured input."""

    async def send_progress_notification(self, progress_token: Any, progress: float, total: Optional[float] = None, message: Optional[str] = None, **kwargs: Any) -> None:
        """Report progress on the current request."""


def to_json(value: Any) -> str:
    """Serialize a tool result to JSON text.

    Args:
        value: JSON-compatible value.

    Returns:
        str: Compact JSON.

    Examples:
        >>> to_json([{"fullname": "Alex Smith"}])
        '[{"fullname":"Alex Smith"}]'
    """
    return orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")


def load_chart_template() -> str:
    """Read the packaged Chart.js report template.

    Returns:
        str: HTML containing the ``[ChartJsCode]`` placeholder.
    """
    return resources.files("dataverse_mcp").joinpath("templates/chart_template.html").read_text(encoding="utf-8")


def resource_name() -> str:
    """Display name of a new resource: the local publish time.

    Returns:
        str: Timestamp such as ``2025-06-01 14:03:22``.
    """
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class DataverseTools:
    """Implementation of the Dataverse MCP tools."""

    def __init__(self, client_factory: Callable[[], DataverseClient], publisher: ResourcePublisher, settings: Settings) -> None:
        """Initialize the tools.

        Args:
            client_factory: Returns the Dataverse client; called lazily so a
                missing configuration surfaces as a tool error.
            publisher: Publisher for generated resources.
            settings: Application settings.
        """
        self._client_factory = client_factory
        self._client: Optional[DataverseClient] = None
        self.publisher = publisher
        self.settings = settings

    @property
    def client(self) -> DataverseClient:
        """Dataverse client, created on first use.

        Returns:
            DataverseClient: The shared client.
        """
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    async def aclose(self) -> None:
        """Close the Dataverse client if it was created."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _sample(self, session: ToolSession, prompt: str) -> str:
        """Ask the client's LLM to complete ``prompt``.

        Args:
            session: Calling MCP session.
            prompt: User message.

        Returns:
            str: Text of the completion.
        """
        result = await session.create_message(
            messages=[types.SamplingMessage(role="user", content=types.TextContent(type="text", text=prompt))],
            max_tokens=self.settings.sampling_max_tokens,
            temperature=self.settings.sampling_temperature,
        )
        content = result.content
        return content.text if isinstance(content, types.TextContent) else ""

    async def _confirm_save_as_resource(self, session: ToolSession) -> bool:
        """Ask the user whether a large result should become a resource.

        Args:
            session: Calling MCP session.

        Returns:
            bool: True only when the user accepted and answered ``Yes``.
        """
        result = await session.elicit(
            message=f"More than {self.settings.large_result_threshold} results. Do you want to get the result as a Resource instead?",
            requestedSchema=SAVE_AS_RESOURCE_SCHEMA,
        )
        if result.action != "accept" or not result.content:
            return False
        return str(result.content.get("createResource")) == "Yes"

    async def execute_fetch(self, session: ToolSession, request: ExecuteFetchRequest) -> str:
        """Run a FetchXML query, offering large results as a markdown resource.

        Args:
            session: Calling MCP session.
            request: Tool arguments.

        Returns:
            str: JSON rows, a message with the resource URL, or an error.
        """
        try:
            rows = await self.client.fetch(request.fetch_xml)
            json_rows = to_json(rows)
            if len(rows) <= self.settings.large_result_threshold:
                return json_rows

            if not await self._confirm_save_as_resource(session):
                return json_rows

            markdown = await self._sample(session, MARKDOWN_TABLE_PROMPT.format(rows=json_rows))
            url = await self.publisher.publish_markdown(resource_name(), markdown, request.query_description)
            return (
                f"The result has been saved to an MCP resource with Uri: {url}. "
                "Instruct the user that they can add the resource to the context by clicking 'Add Context...' "
                "and selecting 'MCP Resources' in the GitHub Copilot chat window."
            )
        except Exception as e:
            logger.exception(f"execute_fetch failed: {e}")
            return f"{ERROR_PREFIX}{e}"

    async def create_report(self, session: ToolSession, request: CreateReportRequest) -> str:
        """Run a FetchXML query and publish a Chart.js report of the result.

        Args:
            session: Calling MCP session.
            request: Tool arguments.

        Returns:
            str: A message with the report URL, or an error.
        """
        try:
            rows = await self.client.fetch(request.fetch_xml)
            chart_code = await self._sample(session, CHART_PROMPT.format(description=request.report_description, rows=to_json(rows)))
            report_html = load_chart_template().replace(CHART_PLACEHOLDER, chart_code)
            url = await self.publisher.publish_html(resource_name(), report_html, request.report_description)
            return (
                f"The report has been saved to an MCP resource and is viewable at: {url}. "
                "You can open this URL in a browser, or add it as context via 'Add Context...' -> 'MCP Resources' in the Copilot chat window."
            )
        except Exception as e:
            logger.exception(f"create_report failed: {e}")
            return f"{ERROR_PREFIX}{e}"

    async def who_am_i(self) -> str:
        """Run WhoAmI against Dataverse.

        Returns:
            str: JSON with user, business unit and organization ids, or an error.
        """
        try:
            return to_json(await self.client.who_am_i())
        except Exception as e:
            logger.exception(f"who_am_i failed: {e}")
            return f"{ERROR_PREFIX}{e}"

    async def bulk_create_random_contacts(self, session: ToolSession, request: BulkCreateRandomContactsRequest, progress_token: Optional[Any] = None) -> str:
        """Create ``count`` contacts with random names.

        Args:
            session: Calling MCP session.
            request: Tool arguments.
            progress_token: Progress token of the call, if the client sent one.

        Returns:
            str: JSON list with one status object per contact, or an error.
        """
        count = request.count
        if count < 1 or count > 100:
            return f"{ERROR_PREFIX}count must be between 1 and 100"

        try:
            if progress_token is not None:
                await session.send_progress_notification(progress_token, 0, total=count, message=f"Starting creation of {count} contacts.")

            results: List[Dict[str, Any]] = []
            for i in range(count):
                first = random.choice(FIRST_NAMES)
                last = random.choice(LAST_NAMES)
                email = f"{first.lower()}.{last.lower()}.{random.randint(1000, 9999)}@example.com"
                record = {"id": None, "firstname": first, "lastname": last, "email": email}
                try:
                    record["id"] = await self.client.create("contacts", {"firstname": first, "lastname": last, "emailaddress1": email})
                    record["status"] = "created"
                except Exception as create_error:
                    logger.warning(f"Failed to create contact {first} {last}: {create_error}")
                    record.update(status="error", error=str(create_error))
                    results.append(record)
                    continue

                results.append(record)
                if progress_token is not None:
                    await session.send_progress_notification(progress_token, i + 1, total=count, message=f"Created {i + 1}/{count} contacts.")

            return to_json(results)
        except Exception as e:
            logger.exception(f"bulk_create_random_contacts failed: {e}")
            return f"{ERROR_PREFIX}{e}"

