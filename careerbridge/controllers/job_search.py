from typing import List, Optional

import structlog

from careerbridge.constants import LOADING_SOURCES_PLACEHOLDER, NO_SOURCES_PLACEHOLDER
from careerbridge.controllers.guard import RequestGuard
from careerbridge.errors import ProviderError
from careerbridge.models import CamelModel, SearchResult, UserProfile
from careerbridge.services.model_gateway import ModelGateway

logger = structlog.get_logger(__name__)

SEARCH = "search"


class SourceLink(CamelModel):
    title: str
    uri: str
    hostname: str


class JobSearchView(CamelModel):
    search_term: str
    selected_field: str
    loading: bool
    report: Optional[str]
    sources: List[SourceLink]
    sources_placeholder: Optional[str]
    can_export: bool
    error: Optional[str]


class JobSearchController:
    """Live job search. Results are replaced atomically; superseded responses are dropped."""

    def __init__(self, gateway: ModelGateway, profile: UserProfile):
        self.gateway = gateway
        self.profile = profile
        self.search_term = ""
        self.selected_field = profile.field
        self.result: Optional[SearchResult] = None
        self.loading = False
        self.error: Optional[str] = None
        self.searches_started = 0
        self._guard = RequestGuard()

    async def on_display(self) -> None:
        """First display of the page runs a search with the profile defaults."""
        if self.searches_started == 0:
            await self.search()

    async def search(
        self, search_term: Optional[str] = None, field: Optional[str] = None
    ) -> None:
        if search_term is not None:
            self.search_term = search_term
        if field is not None:
            self.selected_field = field

        query = self.profile.model_copy(
            update={"field": self.selected_field, "preferences": self.search_term}
        )
        ticket = self._guard.begin(SEARCH)
        self.searches_started += 1
        self.loading = True
        self.error = None
        try:
            result = await self.gateway.match_jobs(query)
        except ProviderError as e:
            if self._guard.current(SEARCH, ticket):
                logger.error("Job search failed", error=str(e))
                self.error = "The live job search failed. Please try again."
                self.loading = False
            return

        if not self._guard.current(SEARCH, ticket):
            logger.info("Discarding superseded job search result")
            return
        self.result = result
        self.loading = False

    def export_report(self) -> Optional[str]:
        """Markdown export of the current search report with its sources."""
        if self.result is None:
            return None
        lines = [
            f"# Job Search Report: {self.selected_field or 'All fields'}",
            "",
        ]
        if self.search_term:
            lines += [f"Search: {self.search_term}", ""]
        lines += [self.result.text, "", "## Sources", ""]
        if self.result.sources:
            lines += [f"- [{s.title}]({s.uri})" for s in self.result.sources]
        else:
            lines.append(NO_SOURCES_PLACEHOLDER)
        return "\n".join(lines) + "\n"

    def view(self) -> JobSearchView:
        sources = self.result.sources if self.result else []
        if sources:
            placeholder = None
        elif self.loading:
            placeholder = LOADING_SOURCES_PLACEHOLDER
        else:
            placeholder = NO_SOURCES_PLACEHOLDER
        return JobSearchView(
            search_term=self.search_term,
            selected_field=self.selected_field,
            loading=self.loading,
            report=self.result.text if self.result else None,
            sources=[SourceLink(title=s.title, uri=s.uri, hostname=s.hostname) for s in sources],
            sources_placeholder=placeholder,
            can_export=self.result is not None,
            error=self.error,
        )
