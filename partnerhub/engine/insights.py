"""
Insights - AI strategic summary of the partner network.
Never raises: failures fall back to a static message.
"""

import logging
from typing import List, Optional

from partnerhub.bus.events import bus, EVENT_INSIGHTS_READY
from partnerhub.config import config
from partnerhub.engine.ai_client import call_ai
from partnerhub.logging_config import log_call
from partnerhub.models import Company

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "Add partner companies to get AI insights."
FALLBACK_MESSAGE = "Could not generate insights right now."


def build_network_summary(companies: List[Company]) -> str:
    return ", ".join(
        f"{c.name} (Brokers: {c.broker_count}, Commission: {c.commission_rate:g}%, "
        f"Account owner: {c.account_owner})"
        for c in companies
    )


def build_insights_prompt(companies: List[Company]) -> str:
    return f"""Analyze the following list of partner real-estate agencies and provide a strategic summary.

Consider the size of each network (broker head-count), the negotiated commission rates (typically 1% to 8%)
and the internal account owners responsible for each agreement. Identify success patterns and agreements
that need review.

Give practical suggestions to maximize the network's ROI and partner engagement.

List: {build_network_summary(companies)}"""


@log_call
def generate_network_insights(companies: List[Company], model: Optional[str] = None) -> str:
    """Narrative summary of the whole collection, or a fallback message."""
    if not companies:
        return EMPTY_MESSAGE

    _model = model or config.DEFAULT_AI_MODEL
    logger.info(f"Generating network insights for {len(companies)} companies with {_model}")

    try:
        text = call_ai(build_insights_prompt(companies), model=_model)
    except (ValueError, RuntimeError) as e:
        logger.error(f"generate_network_insights failed: {e}", exc_info=True)
        return FALLBACK_MESSAGE

    bus.emit(EVENT_INSIGHTS_READY, {'model': _model, 'company_count': len(companies)})
    return text
