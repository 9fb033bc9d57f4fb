"""Prompt templates for the Perplexity completion API."""

CHAT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant for GhostFund, a privacy-focused crowdfunding "
    "platform. Help users with their questions about creating and funding projects, "
    "privacy features, and platform functionality."
)


def get_risk_analysis_prompt(description: str) -> str:
    """
    Build the risk assessment prompt.

    The response is mined with regexes afterwards, so the numbered list
    asks for a "risk score" and a single approve/reject/review word.
    """
    return f"""Analyze the following project description for potential risks:

{description}

Please provide:
1. Overall risk score (1-10)
2. Identified red flags (if any)
3. Legitimacy assessment
4. Recommendation (approve/reject/review)
"""


def get_suggestions_prompt(description: str) -> str:
    return f"""Review the following project description and provide constructive suggestions
to improve its appeal to potential funders:

{description}

Please provide:
1. Three specific improvements for clarity
2. Two suggestions to increase credibility
3. One recommendation for better presentation
"""
