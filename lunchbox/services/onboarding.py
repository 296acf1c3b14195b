"""Scripted onboarding dialogue.

The dialogue is a fixed linear sequence of yes/no questions followed by one
free-text question. The conversation keeps the current step explicitly and
feeds it, together with the user's reply, to ``advance``; nothing here reads
the message history.
"""

from dataclasses import dataclass
from enum import IntEnum

from lunchbox.models.profile import Interests

GREETING_TEXT = "Hey! I'm your Lunchbox.ai buddy. Let me get to know you first. Do you play sports?"
RESTART_TEXT = "Do you play sports?"
WELCOME_BACK_TEXT = "Welcome back! What's on your plate today?"
ONBOARDING_DONE_TEXT = "Perfect! Now what's on your plate today?"

AFFIRMATIVE_WORDS = ("yes", "yeah", "sure")

class OnboardingStep(IntEnum):
    GREETING = 0
    SPORTS = 1
    SOCIALIZING = 2
    GAMING = 3
    OTHER_INTERESTS = 4
    COMPLETE = 5

# Step the conversation sits at once the greeting has been shown
FIRST_QUESTION_STEP = OnboardingStep.SPORTS

@dataclass(frozen=True)
class OnboardingTurn:
    text: str
    interests: Interests
    complete: bool
    next_step: OnboardingStep

def is_affirmative(text: str) -> bool:
    """Substring match against the accepted yes-words, ignoring case."""
    lowered = text.lower()
    return any(word in lowered for word in AFFIRMATIVE_WORDS)

def _sports(text: str) -> OnboardingTurn:
    likes_sports = is_affirmative(text)
    return OnboardingTurn(
        text="Cool! Do you like to go out with friends?" if likes_sports
        else "Got it. Do you like to go out with friends?",
        interests=Interests(sports=likes_sports),
        complete=False,
        next_step=OnboardingStep.SOCIALIZING
    )

def _socializing(text: str) -> OnboardingTurn:
    likes_socializing = is_affirmative(text)
    # sports stays hardcoded to True from here on, matching the shipped flow
    return OnboardingTurn(
        text="Nice! Do you play games with friends?" if likes_socializing
        else "Got it. Do you play games with friends?",
        interests=Interests(sports=True, socializing=likes_socializing),
        complete=False,
        next_step=OnboardingStep.GAMING
    )

def _gaming(text: str) -> OnboardingTurn:
    return OnboardingTurn(
        text="Anything else you like?",
        interests=Interests(sports=True, socializing=True, gaming=is_affirmative(text)),
        complete=False,
        next_step=OnboardingStep.OTHER_INTERESTS
    )

def _other_interests(text: str) -> OnboardingTurn:
    return OnboardingTurn(
        text="Got it! What's on your plate today?",
        interests=Interests(sports=True, socializing=True, gaming=True, other_interests=[text]),
        complete=True,
        next_step=OnboardingStep.COMPLETE
    )

TRANSITIONS = {
    OnboardingStep.SPORTS: _sports,
    OnboardingStep.SOCIALIZING: _socializing,
    OnboardingStep.GAMING: _gaming,
    OnboardingStep.OTHER_INTERESTS: _other_interests,
}

def advance(step: OnboardingStep, text: str) -> OnboardingTurn:
    """Interpret the reply given at ``step`` and produce the next turn.

    Any step without a transition falls back to asking the first question
    again with all interests cleared.
    """
    handler = TRANSITIONS.get(step)
    if handler is None:
        return OnboardingTurn(
            text=RESTART_TEXT,
            interests=Interests(),
            complete=False,
            next_step=FIRST_QUESTION_STEP
        )
    return handler(text)
