# src/core/responder.py
from __future__ import annotations

from src.core.sim_models import ResponseContext

TECHNICAL_KEYWORDS = ("how", "what", "explain")
MINING_KEYWORDS = ("mining", "hash", "cryptocurrency")

CATEGORY_TECHNICAL = "technical"
CATEGORY_MINING = "mining"
CATEGORY_GENERAL = "general"


def classify_query(query: str) -> str:
    """
    Pick a response template by simple keyword matching.

    Question words win over topic words, so "What is mining?" is a
    technical question. This order is deliberate: earlier releases checked
    mining words first and answered that question with the mining template.
    """
    lower = query.lower()
    if any(word in lower for word in TECHNICAL_KEYWORDS):
        return CATEGORY_TECHNICAL
    if any(word in lower for word in MINING_KEYWORDS):
        return CATEGORY_MINING
    return CATEGORY_GENERAL


def _efficiency_pct(ctx: ResponseContext) -> float:
    if ctx.max_hash_rate <= 0:
        return 0.0
    return ctx.hash_rate / ctx.max_hash_rate * 100


def _technical(query: str, ctx: ResponseContext) -> str:
    return f"""Technical Response for "{query}":

Based on the computational work performed during this query ({round(ctx.hash_rate)} H/s average), here's my analysis:

This interface demonstrates a novel approach to AI service provision where users contribute computational resources in exchange for AI responses. The mining simulation ran for {ctx.processing_time_s:.1f} seconds, during which your device contributed processing power and found {ctx.discovery_count} hashes.

The system balances resource usage with response quality - lower computational contribution may result in longer processing times, creating a fair exchange mechanism."""


def _mining(query: str, ctx: ResponseContext) -> str:
    operations = round(ctx.hash_rate * ctx.processing_time_s)
    return f"""Mining Analysis for "{query}":

The mining simulation you just experienced represents a proof-of-work computation similar to cryptocurrency mining. During processing, your device performed approximately {operations} hash operations.

Key insights:
• Your estimated hash rate: {round(ctx.max_hash_rate)} H/s
• Shares found during processing: {ctx.discovery_count}
• Processing efficiency: {_efficiency_pct(ctx):.1f}%

This demonstrates the fair trade principle - computational resources for AI intelligence."""


def _general(query: str, ctx: ResponseContext) -> str:
    return f"""AI Response for "{query}":

Thank you for your computational contribution! During processing, the system achieved:
• Hash rate: {round(ctx.hash_rate)} H/s
• Processing time: {ctx.processing_time_s:.1f} seconds
• Computational shares: {ctx.discovery_count}

Your query has been processed using distributed computation principles. The mining simulation demonstrates how AI services can be powered by user-contributed resources, creating a fair and transparent exchange of computation for intelligence.

This proof-of-concept shows how future AI systems might operate on a contribute-to-use model, ensuring sustainable and democratized access to AI capabilities."""


_TEMPLATES = {
    CATEGORY_TECHNICAL: _technical,
    CATEGORY_MINING: _mining,
    CATEGORY_GENERAL: _general,
}


def generate_contextual_response(query: str, ctx: ResponseContext) -> str:
    """Canned response for when no text-generation provider answered."""
    return _TEMPLATES[classify_query(query)](query, ctx)
