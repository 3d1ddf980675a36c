"""
Prism Research Worker — Prompt Templates

All prompts are defined here. Research templates carry [PRODUCT] and [NICHE]
tokens that build_prompt() fills in.
"""

import json

PRODUCT_TOKEN = "[PRODUCT]"
NICHE_TOKEN = "[NICHE]"
DEFAULT_NICHE = "this market"


# -----------------------------------------------------------------------------
# 1. Single-phase research
# -----------------------------------------------------------------------------

RESEARCH_PROMPT = """You are a direct response market researcher. Conduct deep research on this product and market.

Find as many as possible for each category:

- Pain points & fears (with verbatim customer quotes and sources)
- Desires & goals (with quotes)
- Objections & hesitations (with quotes)
- Emotional drivers
- Identity shifts (who they want to become)
- Current beliefs about the problem
- Trigger events that make them search for solutions
- Buying criteria they use to evaluate options
- Relationships & influences (who they trust, communities they're part of, authorities they follow)
- Competitor mentions & complaints
- Demographics (age, gender, income, location, life stage)
- Psychographics (values, lifestyle, personality traits)
- Potential ad angles

For each item, include:
- The insight
- A verbatim quote if available
- Source URL

Organize findings by awareness level where applicable:
- Unaware (don't know they have a problem)
- Problem-aware (know the problem, not the solutions)
- Solution-aware (know solutions exist, comparing options)
- Product-aware (know this product, not convinced)
- Most-aware (ready to buy, need final push)

Be thorough. Quality over arbitrary counts.

Product: [PRODUCT]
Niche: [NICHE]"""


# -----------------------------------------------------------------------------
# 2. Dual-phase research
# -----------------------------------------------------------------------------

PHASE_1_PROMPT = """You are an elite direct response market researcher trained in the methods of Gary Halbert, Eugene Schwartz, Dan Kennedy, and John Carlton. Conduct exhaustive research on [PRODUCT] in the [NICHE] market.

Find as many as possible for each category:

CORE RESEARCH:
- Pain points & fears (with verbatim customer quotes and sources)
- Desires & goals (with quotes)
- Hidden desires (things they want but are embarrassed to admit — status, vanity, revenge, proving others wrong, sexual desirability, feeling younger)
- Objections & hesitations (with quotes)
- Emotional drivers (the feelings that push them to act)
- Identity shifts (who they are now vs. who they want to become)
- Current beliefs about the problem
- The villain (who or what do they blame for their situation?)

BUYING BEHAVIOR:
- Trigger events that make them search NOW (life events, seasons, health scares, relationships, milestones)
- Failed solutions (what have they already tried that didn't work? Why did it fail?)
- Buying criteria (how do they evaluate options? What features matter?)
- Decision timeline (how long do they research before buying?)
- Price anchors (what have they paid for similar things? What feels "expensive" vs "cheap"?)
- Proof preferences (what evidence convinces them — testimonials, studies, before/afters, credentials, celebrity?)
- Risk perception (what's the worst case they imagine? What makes them hesitate at checkout?)
- Spouse/influencer objections (what would their partner, friends, doctor, or family say?)

LANGUAGE & VOICE:
- Exact language patterns (specific recurring words, phrases, slang they use)
- How they describe the problem in their own words
- How they describe success/the dream outcome in their own words
- Emotional vocabulary (the feeling words they use)
- Metaphors and analogies they use

MARKET INTELLIGENCE:
- Competitor mentions & specific complaints (what do they hate about existing solutions?)
- Success stories they admire (who has solved this that they look up to?)
- Where they research (Reddit, YouTube, Amazon reviews, Facebook groups, TikTok, forums, blogs)
- Influencers and authorities they trust
- Communities they belong to

CUSTOMER LIFECYCLE INSIGHTS:
- Competitor customers (why did they choose the competitor? What do they complain about with that choice?)
- Repeat buyer triggers (what makes someone buy again? What keeps them loyal?)
- Churn reasons (why do people stop using solutions like this? Why do they quit?)
- Referral language (how do happy customers describe this to friends and family?)
- Upsell desires (what else do they want after solving the initial problem?)
- Post-purchase regrets (buyer's remorse triggers, what makes them return products or cancel?)

STRATEGIC OUTPUT:
- Potential ad angles (hook concepts based on the research)
- Potential headlines (based on exact customer language)
- Potential proof elements (what claims can be supported with evidence found?)
- Potential offers (what would be irresistible based on their desires and fears?)
- Potential guarantees (what would eliminate their specific risk perception?)

For each item, include:
- The insight
- A verbatim quote if available
- Source URL

Organize findings by awareness level AND customer stage:

AWARENESS LEVELS (pre-purchase):
- Unaware (don't know they have a problem)
- Problem-aware (know the problem, not the solutions)
- Solution-aware (know solutions exist, comparing options)
- Product-aware (know this specific product, not yet convinced)
- Most-aware (ready to buy, need final push or right offer)

CUSTOMER STAGES (post-purchase):
- New customers (just bought, what do they need to succeed?)
- Active customers (using it, what would make them buy more?)
- At-risk customers (showing signs of leaving, why?)
- Lost customers (left, what drove them away?)
- Advocates (raving fans, how do they sell it for you?)

Be exhaustive. Real customer language over marketing speak. Verbatim quotes over summaries. Depth over breadth. Find the weird, specific, emotional stuff that writes the ads."""


PHASE_2_PROMPT = """For [PRODUCT] in the [NICHE] market, provide demographic and psychographic profiles mapped to each customer segment:

For EACH segment below, tell me WHO they are:

PRE-PURCHASE AWARENESS LEVELS:
1. Unaware - who doesn't realize this is their problem?
2. Problem-Aware - who knows they have the problem but doesn't know solutions exist?
3. Solution-Aware - who is actively comparing options?
4. Product-Aware - who knows about this product or similar products?
5. Most-Aware - who is ready to buy?

POST-PURCHASE STAGES:
6. New Customers
7. Repeat Customers
8. At-Risk (might leave)
9. Lost Customers
10. Advocates

FOR EACH SEGMENT, provide:
- Age range
- Income level
- Race/ethnicity breakdown (cite medical studies if available)
- Life stage (postpartum, perimenopausal, menopausal, post-hysterectomy, on BC, etc.)
- Geographic patterns
- Where they research online (specific subreddits, forums, sites)
- Health philosophy (natural vs. pharmaceutical)
- What influences their decisions (doctors, peers, influencers)
- Buying criteria ranked by importance
- Churn reasons (for post-purchase segments)
- Conversion tactics that work for this segment

Also include:
- Total addressable market size
- Percentage who actively seek solutions
- Market growth trends
- Key platforms for reaching each segment
- Decision influence hierarchy (what actually drives purchases)

Include sources for all data."""


def build_prompt(
    template: str,
    product_name: str,
    niche: str | None = None,
    description: str | None = None,
) -> str:
    """
    Fill a research template for one product.

    Every [PRODUCT] and [NICHE] token is replaced verbatim. A missing niche
    becomes "this market". When a description is given it is appended as its
    own paragraph; otherwise the prompt ends with the template.
    """
    prompt = template.replace(PRODUCT_TOKEN, product_name).replace(NICHE_TOKEN, niche or DEFAULT_NICHE)
    if description:
        return f"{prompt}\n\nProduct description: {description}"
    return prompt


# -----------------------------------------------------------------------------
# 3. Summarizer (structured parsing of the raw research)
# -----------------------------------------------------------------------------

_ITEM = {"insight": "", "quote": "", "source": ""}

SINGLE_PHASE_SCHEMA = {
    "pain_points": [{**_ITEM, "awareness_level": ""}],
    "desires": [_ITEM],
    "objections": [_ITEM],
    "emotional_drivers": [_ITEM],
    "identity_shifts": [_ITEM],
    "beliefs": [_ITEM],
    "trigger_events": [_ITEM],
    "buying_criteria": [_ITEM],
    "influences": [_ITEM],
    "competitor_insights": [_ITEM],
    "demographics": {"age": "", "gender": "", "income": "", "location": "", "life_stage": ""},
    "psychographics": {"values": [], "lifestyle": [], "personality": []},
    "ad_angles": [{"angle": "", "target_awareness": "", "hook_style": ""}],
}

_SEGMENT = {"age_range": "", "income": "", "life_stage": ""}

DUAL_PHASE_SCHEMA = {
    "phase1_behavioral": {
        "pain_points": [{**_ITEM, "awareness_level": ""}],
        "desires": [_ITEM],
        "hidden_desires": [_ITEM],
        "objections": [_ITEM],
        "emotional_drivers": [_ITEM],
        "identity_shifts": [_ITEM],
        "beliefs": [_ITEM],
        "villains": [_ITEM],
        "trigger_events": [_ITEM],
        "failed_solutions": [_ITEM],
        "buying_criteria": [_ITEM],
        "language_patterns": [{"phrase": "", "context": "", "source": ""}],
        "competitor_insights": [_ITEM],
        "ad_angles": [{"angle": "", "target_awareness": "", "hook_style": ""}],
        "headlines": [{"headline": "", "target_segment": ""}],
        "offers": [{"offer": "", "target_segment": ""}],
        "guarantees": [{"guarantee": "", "addresses_fear": ""}],
    },
    "phase2_demographic": {
        "segments": {
            "unaware": {**_SEGMENT, "where_they_research": [], "health_philosophy": ""},
            "problem_aware": {**_SEGMENT, "where_they_research": [], "health_philosophy": ""},
            "solution_aware": {**_SEGMENT, "where_they_research": [], "buying_criteria": []},
            "product_aware": {**_SEGMENT, "where_they_research": [], "decision_factors": []},
            "most_aware": {**_SEGMENT, "conversion_accelerators": []},
            "new_customers": {"churn_risk": "", "critical_touchpoints": [], "expectations": ""},
            "repeat_customers": {"purchase_pattern": "", "retention_drivers": [], "ltv": ""},
            "at_risk": {"red_flags": [], "churn_reasons": [], "win_back_strategies": []},
            "lost_customers": {"why_they_left": [], "reactivation_potential": ""},
            "advocates": {"behaviors": [], "where_active": [], "amplification_opportunities": []},
        },
        "market_size": {"tam": "", "active_seekers_percent": "", "growth_rate": ""},
        "decision_hierarchy": [],
        "key_platforms": [],
    },
    "total_citations": 0,
}

SUMMARIZE_PROMPT = """Parse the following market research into structured JSON. Extract and organize:
{schema}

Research to parse:
{research}

Return ONLY valid JSON, no other text."""


def build_summarize_prompt(raw_research: str, research_mode: str = "dual") -> list[dict]:
    """
    Build the summarizer request for the given research text.

    The JSON skeleton differs per mode: a flat category list for single-phase
    research, phase1_behavioral / phase2_demographic sections for dual-phase.

    Returns:
        [{"role": "user", "content": "..."}]
    """
    schema = DUAL_PHASE_SCHEMA if research_mode == "dual" else SINGLE_PHASE_SCHEMA
    content = SUMMARIZE_PROMPT.format(
        schema=json.dumps(schema, indent=2),
        research=raw_research,
    )
    return [{"role": "user", "content": content}]
