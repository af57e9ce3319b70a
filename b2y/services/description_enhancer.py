"""Listing description enhancer: financial insights plus optional LLM polish via LangChain."""

from typing import Any, Callable
from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI
from b2y.models.description import DescriptionRequest, EnhancedDescription
from b2y.utils.config import AppConfig
from b2y.utils.errors import DescriptionError
from b2y.utils.formatters import format_currency, format_percentage, parse_br_number, parse_percentage
from b2y.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

CLOSING_PITCH = (
    "This business is a strong investment opportunity with high return potential, "
    "ideal for entrepreneurs looking for a solid project to grow."
)


def _lenient(parse: Callable[[Any], float], value: Any) -> float:
    """Unparseable numbers count as zero, the form may be half filled."""
    try:
        return parse(value)
    except (TypeError, ValueError):
        return 0.0


def compute_insights(request: DescriptionRequest) -> list[str]:
    """Profit and payback sentences derived from the draft's numbers."""
    price = _lenient(parse_br_number, request.price)
    revenue = _lenient(parse_br_number, request.annual_revenue)
    margin = _lenient(parse_percentage, request.profit_margin)

    insights = []
    if revenue > 0 and margin > 0:
        annual_profit = revenue * margin
        insights.append(
            f"With annual revenue of {format_currency(revenue, decimals=0)} and a "
            f"{format_percentage(margin)} margin, estimated annual profit is "
            f"{format_currency(annual_profit, decimals=0)}."
        )
        if price > 0:
            payback_years = price / annual_profit
            insights.append(
                f"Simple payback, ignoring other factors, is roughly {payback_years:.1f} years."
            )
    insights.append(CLOSING_PITCH)
    return insights


def template_description(request: DescriptionRequest) -> EnhancedDescription:
    """Deterministic enhancement used on its own or as the LLM fallback."""
    insights = compute_insights(request)
    return EnhancedDescription(
        title=f"{request.title} - Unique Opportunity in the Sector!",
        description=(
            f"**Original description:**\n{request.description}\n\n"
            f"**Analysis and optimization (B2Y AI):**\n{' '.join(insights)}"
        ),
    )


def build_enhancement_prompt(request: DescriptionRequest, draft: EnhancedDescription) -> str:
    return f"""You polish business-for-sale listings for a Brazilian marketplace.
Rewrite the title and description below so they are clear, attractive, and honest.
Keep every number exactly as given. Never invent facts that are not in the input.
Keep the title under 90 characters. Answer in the same language as the original description.

Original title: {request.title}
Original description:
{request.description}

Draft with computed insights:
Title: {draft.title}
{draft.description}"""


def get_llm_model():
    """Get the configured chat model."""
    provider = AppConfig.llm_provider()
    model_name = AppConfig.llm_model()

    logger.debug("Getting LLM model", llm_provider=provider, llm_model=model_name)

    if provider == "anthropic":
        api_key = AppConfig.env("ANTHROPIC_API_KEY")
        if not api_key:
            raise DescriptionError("ANTHROPIC_API_KEY not set")
        return ChatAnthropic(model=model_name, api_key=api_key)
    elif provider == "openai":
        api_key = AppConfig.env("OPENAI_API_KEY")
        if not api_key:
            raise DescriptionError("OPENAI_API_KEY not set")
        return ChatOpenAI(model=model_name, api_key=api_key)
    else:
        raise DescriptionError(f"Unsupported LLM provider: {provider}")


async def enhance_description(request: DescriptionRequest) -> EnhancedDescription:
    """
    Return an improved {title, description} for a draft listing.

    The template result is always computed. With USE_LLM_DESCRIPTION=true
    it is handed to the LLM for polishing; any LLM failure returns the
    template result instead.
    """
    draft = template_description(request)
    if not AppConfig.use_llm_description():
        return draft

    try:
        model = get_llm_model()
        structured_llm = model.with_structured_output(EnhancedDescription)
        with log_timing("llm_enhance_description", logger=logger, llm_provider=AppConfig.llm_provider()):
            result = await structured_llm.ainvoke(build_enhancement_prompt(request, draft))
        if not isinstance(result, EnhancedDescription):
            result = EnhancedDescription.model_validate(result)
        return result
    except Exception as e:
        logger.error(
            "LLM description enhancement failed, using template",
            error=str(e),
            llm_provider=AppConfig.llm_provider(),
            exc_info=True
        )
        return draft
