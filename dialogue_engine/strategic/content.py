"""Canned option content synthesized by strategic actions, keyed by mentor id.

The ``"default"`` entry is used for characters without their own table.
"""
from __future__ import annotations

from typing import Any

from dialogue_engine.models.dialogue import DialogueOption

DEFAULT_KEY = "default"

REFRAME_NARRATION = "I need to refocus this conversation on more familiar ground."
EXTRAPOLATE_NARRATION = "I see a connection between this concept and others we've discussed..."
BOAST_NARRATION = "Prove your expertise with a more advanced response."
SYNTHESIS_NARRATION = "I'd like to explore a new aspect of this field we haven't covered yet."

REFRAME_FALLBACKS: dict[str, list[dict[str, Any]]] = {
    "kapoor": [
        {
            "id": "reframe-kapoor-basic",
            "text": "Could we revisit the fundamental principles involved?",
            "response_text": "Yes, that's a sensible approach. Let's examine the core concepts.",
            "approach": "humble",
        },
        {
            "id": "reframe-kapoor-protocol",
            "text": "How is this documented in our protocol manuals?",
            "response_text": "Turning to established protocols is always prudent. The documentation states...",
            "approach": "precision",
        },
    ],
    "jesse": [
        {
            "id": "reframe-jesse-practical",
            "text": "How would this work in an everyday clinical scenario?",
            "response_text": "Great question! In the real world, we'd handle it like this...",
            "approach": "humble",
        },
        {
            "id": "reframe-jesse-experience",
            "text": "Have you encountered similar situations before?",
            "response_text": "Oh yeah, plenty of times. Let me tell you about one case...",
            "approach": "humble",
        },
    ],
    "quinn": [
        {
            "id": "reframe-quinn-concept",
            "text": "Could you explain this with a conceptual model?",
            "response_text": "I love conceptual thinking! Let's visualize it this way...",
            "approach": "precision",
        },
        {
            "id": "reframe-quinn-innovative",
            "text": "Is there an alternative approach to this problem?",
            "response_text": "There's always another angle! Consider this perspective...",
            "approach": "humble",
        },
    ],
    DEFAULT_KEY: [
        {
            "id": "reframe-basic",
            "text": "Could we revisit the fundamental concepts first?",
            "response_text": "Yes, let's go back to basics.",
            "approach": "humble",
        },
        {
            "id": "reframe-practical",
            "text": "How is this applied in everyday clinical practice?",
            "response_text": "That's a good practical perspective.",
            "approach": "humble",
        },
    ],
}

EXTRAPOLATE_OPTIONS: dict[str, list[dict[str, Any]]] = {
    "kapoor": [
        {
            "id": "extrapolate-kapoor-qa",
            "text": "This calibration process relates to our quality assurance framework.",
            "response_text": "Excellent connection. Our QA systems do indeed share the same foundational principles.",
            "knowledge_gain": {"concept_id": "qa-principles", "domain_id": "quality-assurance"},
            "approach": "precision",
        },
        {
            "id": "extrapolate-kapoor-regulatory",
            "text": "I see parallels with regulatory compliance requirements.",
            "response_text": "An astute observation. The regulatory framework influences many of our procedures.",
            "knowledge_gain": {"concept_id": "regulatory-compliance", "domain_id": "administration"},
            "approach": "precision",
        },
    ],
    "jesse": [
        {
            "id": "extrapolate-jesse-maintenance",
            "text": "This reminds me of the preventive maintenance schedule.",
            "response_text": "You're catching on! The same principles of proactive error detection apply to both.",
            "knowledge_gain": {"concept_id": "preventive-maintenance", "domain_id": "equipment"},
            "approach": "precision",
        },
        {
            "id": "extrapolate-jesse-troubleshooting",
            "text": "The diagnostic process here is similar to system troubleshooting.",
            "response_text": "Exactly right! Both require systematic elimination of variables.",
            "knowledge_gain": {"concept_id": "diagnostics", "domain_id": "equipment"},
            "approach": "precision",
        },
    ],
    "quinn": [
        {
            "id": "extrapolate-quinn-research",
            "text": "This principle appears in experimental design as well.",
            "response_text": "Brilliant observation! The scientific method transcends specific applications.",
            "knowledge_gain": {"concept_id": "experimental-design", "domain_id": "research"},
            "approach": "precision",
        },
        {
            "id": "extrapolate-quinn-innovation",
            "text": "This could have applications in emerging treatment modalities.",
            "response_text": "You're thinking ahead! That's exactly the kind of cross-domain insight we need.",
            "knowledge_gain": {"concept_id": "treatment-innovation", "domain_id": "emerging-tech"},
            "approach": "confidence",
        },
    ],
    DEFAULT_KEY: [
        {
            "id": "extrapolate-connection-1",
            "text": "This relates to quality assurance principles we discussed earlier.",
            "response_text": "Excellent connection. The same principles apply across domains.",
            "knowledge_gain": {"concept_id": "qa-principles", "domain_id": "quality-assurance"},
            "approach": "precision",
        },
        {
            "id": "extrapolate-connection-2",
            "text": "The inverse square law applies here, just like in radiation safety.",
            "response_text": "Very astute observation. Physical principles transcend specific applications.",
            "knowledge_gain": {"concept_id": "inverse-square-law", "domain_id": "radiation-physics"},
            "approach": "precision",
        },
    ],
}

# Each table is an (expert, overconfident) pair.
BOAST_OPTIONS: dict[str, list[dict[str, Any]]] = {
    "kapoor": [
        {
            "id": "boast-kapoor-advanced",
            "text": (
                "This relates to the electron spectral changes at depth, which affect the "
                "depth-dose curve through fluence perturbations."
            ),
            "response_text": (
                "Impressive grasp of advanced dosimetry. The fluence perturbations do indeed "
                "affect the depth-dose relationship in complex ways."
            ),
            "relationship_change": 3,
            "knowledge_gain": {"concept_id": "electron_equilibrium_understood", "domain_id": "radiation-physics"},
            "approach": "precision",
        },
        {
            "id": "boast-kapoor-wrong",
            "text": "The buildup effect is primarily a result of back-scattered radiation from deeper tissues.",
            "response_text": (
                "That's incorrect. Buildup is predominantly related to forward-scattered secondary "
                "electrons. This is a fundamental concept that should be well understood."
            ),
            "relationship_change": -2,
            "approach": "confidence",
        },
    ],
    DEFAULT_KEY: [
        {
            "id": "boast-generic-advanced",
            "text": "I believe I can demonstrate a more advanced understanding of this topic.",
            "response_text": "A precise answer. That is exactly the depth this work requires.",
            "relationship_change": 1,
            "knowledge_gain": {"concept_id": "advanced-understanding", "domain_id": "general"},
            "approach": "confidence",
        },
        {
            "id": "boast-generic-wrong",
            "text": "I'd like to propose an alternative explanation based on emerging research.",
            "response_text": "Interesting approach, though I'd caution against relying on unverified concepts.",
            "relationship_change": -1,
            "approach": "creative",
        },
    ],
}

SYNTHESIS_OPTIONS: dict[str, list[dict[str, Any]]] = {
    "kapoor": [
        {
            "id": "synthesis-kapoor-protocols",
            "text": "Let's explore clinical protocol optimization.",
            "response_text": "An excellent area to investigate. Protocol refinement is critical to clinical efficacy.",
            "knowledge_gain": {"concept_id": "protocol-optimization", "domain_id": "clinical-practice"},
        },
        {
            "id": "synthesis-kapoor-accreditation",
            "text": "I'd like to understand the accreditation requirements better.",
            "response_text": "A prudent topic. Accreditation standards provide an important framework for our practice.",
            "knowledge_gain": {"concept_id": "accreditation-standards", "domain_id": "administration"},
        },
        {
            "id": "synthesis-kapoor-dosimetry",
            "text": "Advanced dosimetry techniques seem relevant here.",
            "response_text": "Indeed they are. Precision in dosimetry directly impacts treatment outcomes.",
            "knowledge_gain": {"concept_id": "advanced-dosimetry", "domain_id": "dosimetry"},
        },
    ],
    "jesse": [
        {
            "id": "synthesis-jesse-calibration",
            "text": "What about alternative calibration methodologies?",
            "response_text": "Great question! There are several approaches we could explore.",
            "knowledge_gain": {"concept_id": "calibration-methods", "domain_id": "equipment"},
        },
        {
            "id": "synthesis-jesse-troubleshooting",
            "text": "Can we discuss advanced troubleshooting techniques?",
            "response_text": "Now you're talking my language! Let me show you some tricks I've learned.",
            "knowledge_gain": {"concept_id": "advanced-troubleshooting", "domain_id": "equipment"},
        },
        {
            "id": "synthesis-jesse-maintenance",
            "text": "I'm interested in predictive maintenance strategies.",
            "response_text": "That's cutting-edge thinking! Predicting failures before they happen is the gold standard.",
            "knowledge_gain": {"concept_id": "predictive-maintenance", "domain_id": "equipment"},
        },
    ],
    "quinn": [
        {
            "id": "synthesis-quinn-research",
            "text": "What emerging research directions seem most promising?",
            "response_text": "Oh, fantastic question! There are several fascinating frontiers right now.",
            "knowledge_gain": {"concept_id": "research-frontiers", "domain_id": "research"},
        },
        {
            "id": "synthesis-quinn-computation",
            "text": "How are computational methods changing the field?",
            "response_text": "That's where the real revolution is happening! Computational approaches are transforming everything.",
            "knowledge_gain": {"concept_id": "computational-methods", "domain_id": "emerging-tech"},
        },
        {
            "id": "synthesis-quinn-ionix",
            "text": "Tell me more about your work with the Ionix chamber.",
            "response_text": "I was hoping you'd ask about that! The Ionix research is my true passion.",
            "knowledge_gain": {"concept_id": "ionix-technology", "domain_id": "emerging-tech"},
        },
    ],
    DEFAULT_KEY: [
        {
            "id": "synthesis-domain-1",
            "text": "Let's explore advanced dosimetry techniques.",
            "response_text": "That's a fascinating area to explore. Let me share what I know.",
            "knowledge_gain": {"concept_id": "advanced-dosimetry", "domain_id": "dosimetry"},
        },
        {
            "id": "synthesis-domain-2",
            "text": "I'd like to understand adaptive planning better.",
            "response_text": "Adaptive planning is indeed a cutting-edge domain. Let's discuss it.",
            "knowledge_gain": {"concept_id": "adaptive-planning", "domain_id": "treatment-planning"},
        },
        {
            "id": "synthesis-domain-3",
            "text": "How are AI systems changing medical physics?",
            "response_text": "That's a forward-looking question. AI is transforming our field in several ways.",
            "knowledge_gain": {"concept_id": "ai-applications", "domain_id": "emerging-tech"},
        },
    ],
}


def options_for(table: dict[str, list[dict[str, Any]]], character_id: str, **defaults: Any) -> list[DialogueOption]:
    """Build fresh option models for ``character_id``, applying shared reward fields.

    Entry-level values win over ``defaults``; a nested ``knowledge_gain`` picks
    up ``knowledge_amount`` when it carries no amount of its own.
    """
    rows = table.get(character_id) or table[DEFAULT_KEY]
    knowledge_amount = defaults.pop("knowledge_amount", 0)
    options: list[DialogueOption] = []
    for row in rows:
        data = {**defaults, **row}
        gain = data.get("knowledge_gain")
        if gain is not None:
            data["knowledge_gain"] = {"amount": knowledge_amount, **gain}
        options.append(DialogueOption.model_validate(data))
    return options
