import json
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from app.features.reports.schemas.report import (
    CodeExample,
    EnrichmentResult,
    ResourceLink,
    Suggestion,
    SuggestionBundle,
)
from app.features.reports.services.llm import CompletionService
from app.features.reports.services.store import ReportStore
from app.platform.errors import EnrichmentUpstreamFailure
from app.platform.logger import get_logger

logger = get_logger(__name__)

NODES_PER_VIOLATION = 3
FALLBACK_MAX_SUGGESTIONS = 5

WCAG_QUICKREF = "https://www.w3.org/WAI/WCAG21/quickref/"

NO_VIOLATIONS_BUNDLE = SuggestionBundle(
    suggestions=[],
    general_recommendations=[
        "Great job! No accessibility violations were found.",
        "Continue to test regularly as your website evolves.",
        "Consider running additional accessibility tests for comprehensive coverage.",
    ],
    resource_links=[
        ResourceLink(title="Web Accessibility Guidelines", url=WCAG_QUICKREF),
    ],
)

FALLBACK_RECOMMENDATIONS = [
    "Implement a comprehensive accessibility testing strategy",
    "Use semantic HTML elements where possible",
    "Ensure proper color contrast ratios",
    "Make all interactive elements keyboard accessible",
]

FALLBACK_LINKS = [
    ResourceLink(title="WCAG 2.1 Guidelines", url=WCAG_QUICKREF),
    ResourceLink(title="axe-core Rules", url="https://dequeuniversity.com/rules/axe/"),
]

IMPACT_PRIORITY = {"critical": "high", "serious": "medium"}

CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class SuggestionService:
    """
    Attaches remediation guidance to a stored report.

    Primary path asks the completion model; if that fails for any reason the
    bundle is built from the report itself. Enrichment therefore never fails
    once the report has been found.
    """

    def __init__(self, store: ReportStore, completion: CompletionService):
        self.store = store
        self.completion = completion

    async def enrich(self, report_id: str, owner_id: str) -> EnrichmentResult:
        report = await self.store.get_by_id(report_id, owner_id)
        violations = (report.axe_results or {}).get("violations") or []

        if not violations:
            logger.info(f"Report {report_id} has no violations; using empty-state suggestions")
            bundle, source = NO_VIOLATIONS_BUNDLE.model_copy(deep=True), "empty"
        else:
            try:
                bundle, source = await self._generate(violations, report.url), "ai"
            except EnrichmentUpstreamFailure as e:
                logger.warning(f"AI suggestions unavailable for report {report_id}, using fallback: {e}")
                bundle, source = build_fallback_bundle(violations), "fallback"
            except Exception as e:
                logger.exception(f"Unexpected error generating suggestions for report {report_id}, using fallback: {e}")
                bundle, source = build_fallback_bundle(violations), "fallback"

        generated_at = self.store.clock()
        await self.store.update_enrichment(report_id, owner_id, bundle, generated_at)
        logger.info(f"Stored {source} suggestions for report {report_id} ({len(bundle.suggestions)} items)")

        return EnrichmentResult(bundle=bundle, source=source, generated_at=generated_at)

    async def _generate(self, violations: List[Dict[str, Any]], url: str) -> SuggestionBundle:
        prompt = build_prompt(violations, url)
        text = await self.completion.complete(prompt)
        return parse_bundle(text)


def summarize_violations(violations: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Prompt payload: rule metadata plus at most three affected nodes per rule."""
    return [
        {
            "id": violation.get("id"),
            "impact": violation.get("impact"),
            "description": violation.get("description"),
            "help": violation.get("help"),
            "nodes": [
                {
                    "html": node.get("html"),
                    "target": node.get("target"),
                    "failureSummary": node.get("failureSummary"),
                }
                for node in (violation.get("nodes") or [])[:NODES_PER_VIOLATION]
            ],
        }
        for violation in violations
    ]


def build_prompt(violations: List[Dict[str, Any]], url: str) -> str:
    return f"""
You are an expert web accessibility consultant. Analyze the following accessibility violations from an axe-core scan of the website "{url}" and provide specific, actionable code suggestions to fix each issue.

Accessibility Violations:
{json.dumps(summarize_violations(violations), indent=2)}

For each violation, provide:
1. A clear explanation of the problem
2. The accessibility impact and WCAG guidelines affected
3. Specific HTML/CSS/JavaScript code examples showing how to fix the issue
4. Best practices and additional recommendations

Format your response as a JSON object with this structure:
{{
  "suggestions": [
    {{
      "violationId": "rule-id",
      "priority": "high|medium|low",
      "title": "Brief title of the fix",
      "problem": "Clear explanation of the accessibility issue",
      "wcagGuidelines": ["2.1.1", "4.1.2"],
      "impact": "Description of who this affects and how",
      "solution": "Step-by-step solution explanation",
      "codeExample": {{
        "before": "<!-- Bad example HTML -->",
        "after": "<!-- Fixed example HTML -->",
        "css": "/* Additional CSS if needed */",
        "javascript": "// Additional JavaScript if needed"
      }},
      "additionalTips": ["Additional tip 1", "Additional tip 2"],
      "testingInstructions": "How to test if the fix works"
    }}
  ],
  "generalRecommendations": ["Overall recommendation 1", "Overall recommendation 2"],
  "resourceLinks": [
    {{"title": "WCAG Guidelines", "url": "{WCAG_QUICKREF}"}}
  ]
}}

Focus on practical, implementable solutions that developers can immediately apply. Make sure all code examples are valid and follow modern web standards.
Do not include any text before or after the JSON. Only output valid JSON.
"""


def parse_bundle(text: str) -> SuggestionBundle:
    """Strip markdown fences, parse JSON, validate. Anything unusable is an upstream failure."""
    cleaned = CODE_FENCE.sub("", text or "").strip()
    if not cleaned:
        raise EnrichmentUpstreamFailure("Empty completion")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as json_err:
        # Models sometimes add chatter around the object; keep the outermost braces
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise EnrichmentUpstreamFailure(f"Completion is not JSON: {json_err}") from json_err
        try:
            data = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as e:
            raise EnrichmentUpstreamFailure(f"Completion is not JSON: {e}") from e

    try:
        return SuggestionBundle.model_validate(data)
    except ValidationError as e:
        raise EnrichmentUpstreamFailure(f"Completion does not match the suggestion schema: {e}") from e


def build_fallback_bundle(violations: List[Dict[str, Any]]) -> SuggestionBundle:
    """Deterministic bundle built only from what the report already holds."""
    suggestions = []
    for violation in violations[:FALLBACK_MAX_SUGGESTIONS]:
        impact = violation.get("impact")
        nodes = violation.get("nodes") or []
        first_html = nodes[0].get("html") if nodes else None

        suggestions.append(
            Suggestion(
                violation_id=violation.get("id") or "unknown-rule",
                priority=IMPACT_PRIORITY.get(impact, "low"),
                title=f"Fix {violation.get('id')}",
                problem=violation.get("description") or "",
                wcag_guidelines=[tag for tag in (violation.get("tags") or []) if tag.startswith("wcag")],
                impact=f"This {impact} impact issue affects users with disabilities",
                solution=violation.get("help") or "",
                code_example=CodeExample(
                    before=first_html or "<!-- No example available -->",
                    after="<!-- Please refer to WCAG guidelines for proper implementation -->",
                ),
                additional_tips=[
                    "Refer to WCAG guidelines for detailed implementation",
                    "Test with screen readers and keyboard navigation",
                ],
                testing_instructions="Use axe-core or similar accessibility testing tools to verify the fix",
            )
        )

    return SuggestionBundle(
        suggestions=suggestions,
        general_recommendations=list(FALLBACK_RECOMMENDATIONS),
        resource_links=[link.model_copy() for link in FALLBACK_LINKS],
    )
