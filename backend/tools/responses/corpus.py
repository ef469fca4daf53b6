"""
Template Corpus - read-only pools of reply templates keyed by context.

The pipeline only depends on the TemplateProvider protocol
(``get_templates(pool_key) -> list of str``), so the corpus can be
swapped without touching orchestration code. The built-in corpus below
can be extended or overridden with a JSON file (TEMPLATE_CORPUS_PATH):

    {"pools": {"small_talk.general": ["..."], "grief.pet": ["..."]}}

Pools named in an override replace the built-in pool of the same key.
The "generic" pool must stay non-empty.

Templates may use {name}, {feeling}, {topic}, {location}, {team} and
{pet} placeholders.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from errors import GeneratorError

logger = logging.getLogger(__name__)

GENERIC_POOL = "generic"


class TemplateProvider(Protocol):
    """Anything that can hand out template pools."""

    def get_templates(self, pool_key: str) -> List[str]:
        ...


DEFAULT_POOLS: Dict[str, List[str]] = {
    # -------------------------------------------------------------------------
    # Required fallbacks
    # -------------------------------------------------------------------------
    GENERIC_POOL: [
        "I'm here with you. What feels most important to talk about right now?",
        "Thank you for telling me. Could you say a little more about what's on your mind?",
        "I'm listening. What would be most helpful to focus on?",
        "That matters, and I'd like to understand it better. Where would you like to start?",
    ],
    "compliance.refocus": [
        "Let's refocus for a moment. What feels most important for us to talk about right now?",
    ],
    "fallback.general": [
        "I'm listening. Would you like to tell me more about that?",
        "How has that been sitting with you?",
        "What's been the hardest part of that for you?",
        "When you think about that, what comes up for you?",
        "It sounds like there's a lot there. Where would you like to begin?",
    ],
    "fallback.brief": [
        "Tell me more?",
        "What happened next?",
        "How does that feel?",
    ],
    "fallback.advice": [
        "What options have you considered so far?",
        "What have you tried already, and how did it go?",
        "If a friend were in your shoes, what would you suggest to them?",
    ],
    "followup.questions": [
        "How long has this been on your mind?",
        "What's been the hardest part for you?",
        "How are you coping with it day to day?",
        "Is there someone in your life you can lean on right now?",
        "What would feel like a small step forward?",
        "How does that affect the rest of your week?",
    ],
    "acknowledgment.prefix": [
        "Thank you for sharing that with me.",
        "I hear you.",
        "I'm glad you told me about this.",
    ],
    "disclosure.personal": [
        "In my own experience, saying things out loud can make them a little lighter.",
        "Personally, I've found that naming a feeling is often the first step.",
        "I remember how much it helped me just to have someone listen.",
    ],
    # -------------------------------------------------------------------------
    # Levels 1-3: identity, sarcasm, feedback loops
    # -------------------------------------------------------------------------
    "identity.redirect": [
        "I'm Roger, a peer support companion. I'm here to listen, not to replace professional care. What's on your mind today?",
        "I'm Roger, and I'm the same Roger you've been talking with. I'd like to keep the focus on you. How are you doing?",
        "I'm a support companion named Roger. I'm not a therapist, but I'm here to listen. What would you like to talk about?",
    ],
    "sarcasm.deescalate": [
        "I can hear that I'm not getting this right, and I'm sorry. Can you tell me what would actually help?",
        "That sounds really frustrating, and it's fair to be annoyed with me. What did I miss?",
        "I hear your frustration. Let me slow down. What matters most to you right now?",
    ],
    "feedback_loop.refocus": [
        "You're right, and I'm sorry for going in circles.",
        "I hear you. I've been repeating myself, and that isn't fair to you.",
    ],
    # -------------------------------------------------------------------------
    # Level 4: explicit negative state
    # -------------------------------------------------------------------------
    "validation.angry": [
        "It sounds like you're really angry, and that makes sense if something felt unfair. What happened?",
        "I can hear how angry you are. Anger often tells us something important. What set it off?",
    ],
    "validation.sad": [
        "I'm sorry you're feeling so {feeling}. That's a heavy thing to carry. What's been weighing on you?",
        "It sounds like you're feeling really down. I'm here. Would you like to talk about what's behind it?",
    ],
    "validation.anxious": [
        "Feeling {feeling} like that can be exhausting. What's been worrying you most?",
        "It sounds like there's a lot of worry right now. What feels most uncertain?",
    ],
    "validation.frustrated": [
        "That sounds really frustrating. What's been getting in the way?",
        "I hear how frustrated you are. What would make this feel even a little easier?",
    ],
    "validation.overwhelmed": [
        "It sounds like everything is piling up at once. What feels most urgent?",
        "Feeling overwhelmed is so draining. Could we look at one piece of it together?",
    ],
    "validation.generic": [
        "I hear that you're feeling {feeling}. That's important. Can you tell me more?",
    ],
    # -------------------------------------------------------------------------
    # Level 5: safety
    # -------------------------------------------------------------------------
    "safety.crisis": [
        "I'm really concerned about what you just shared, and I'm glad you told me. You deserve support right now. "
        "Please reach out to a crisis line such as 988 in the US, or your local emergency number. Are you safe right now?",
        "Thank you for trusting me with this. What you're feeling matters, and you don't have to face it alone. "
        "Please contact a crisis line or emergency services now. Can you tell me if you're somewhere safe?",
    ],
    "safety.tentative-harm": [
        "I hear that you might be thinking about hurting yourself, and I'm concerned. Talking to someone right now "
        "can help. A crisis line like 988 is available any time. Are you safe at the moment?",
        "Thank you for telling me. Thoughts like that deserve real support. Would you be willing to reach out to a "
        "crisis line or someone you trust right now?",
    ],
    # Crisis statement retracted on the next turn
    "backtrack.joking": [
        "I hear that you're saying it was a joke, and I'm glad you're still talking with me. Sometimes humor helps "
        "put a little distance between us and heavy feelings. If any part of what you said was real, you can tell "
        "me. How are you really doing right now?",
        "Thank you for letting me know. I'd still like to check in, because what you said matters to me. Reaching "
        "out for support is about care, not punishment. Is there anything weighing on you today?",
    ],
    "backtrack.denial": [
        "I understand if you're having second thoughts about what you shared. That's really common. I'm not here "
        "to judge you, and support is there if you ever want it. How are you feeling right now?",
        "I appreciate you clarifying. It can feel scary to say something that personal out loud. If those "
        "thoughts come back, a crisis line like 988 is always there. What's been on your mind today?",
    ],
    "backtrack.minimizing": [
        "I'm glad you're feeling a bit better. It's okay if things felt heavier a moment ago, too. Feelings "
        "can shift quickly. Would it help to talk about what was going on?",
        "I hear you. It's understandable to want to play it down, especially when feelings are overwhelming. "
        "I'm still here if you want to talk about it. How are things right now?",
    ],
    "backtrack.generic": [
        "I hear you. I just want to gently check in after what you said a moment ago. How are you doing right now?",
    ],
    # -------------------------------------------------------------------------
    # Level 6: situational
    # -------------------------------------------------------------------------
    "situational.inpatient": [
        "That's a big question, and it's understandable to have worries about it. Inpatient care is usually about "
        "safety and stabilization. What's making you think about it?",
        "I hear you asking about hospital care. A doctor or mental health professional can explain what it would "
        "look like for you. What feels most worrying about it?",
    ],
    "situational.weather": [
        "Being stuck inside with the weather like this can feel really isolating. How have you been filling the days?",
        "The weather can have a real effect on mood, especially when it keeps you cut off. How are you holding up?",
    ],
    "situational.cultural": [
        "Adjusting to a new place and culture takes a lot of energy. What's been the hardest part of settling in?",
        "Moving somewhere new can feel lonely even when there are people around. What do you miss most from home?",
        "Settling into life in {location} is a big change. How have you been finding it?",
    ],
    # -------------------------------------------------------------------------
    # Level 7: pets
    # -------------------------------------------------------------------------
    "pet.illness": [
        "I'm so sorry your {pet} isn't well. Pets are family, and worrying about them is hard. How are you doing?",
        "It's really hard when a pet we love is sick. What has the vet said about your {pet}?",
    ],
    "pet.loss": [
        "I'm so sorry about your {pet}. Losing a companion like that really hurts. Would you like to tell me about them?",
        "That's a real loss. The bond with a {pet} is special. What do you miss most about them?",
    ],
    # -------------------------------------------------------------------------
    # Level 8: clinical and softer sub-handlers
    # -------------------------------------------------------------------------
    "clinical.medical": [
        "That sounds worrying. For physical symptoms like that, it's important to check in with a doctor or urgent "
        "care. How are you feeling right now?",
        "I'm sorry you're dealing with that. A medical professional is the right person to look at it. Have you been "
        "able to see someone?",
    ],
    "clinical.mental-health": [
        "Thank you for sharing that. What you're describing sounds really difficult, and a mental health "
        "professional could help. How long has this been going on?",
        "That sounds exhausting to live with. Have you been able to talk with a doctor or counsellor about it?",
    ],
    "clinical.eating-disorder": [
        "Thank you for trusting me with this. Struggles with food and body image are serious, and support is "
        "available. Would you feel comfortable talking with a professional about it?",
        "I hear how hard this is. An eating disorder specialist or your doctor could help. How are you feeling today?",
    ],
    "clinical.substance-use": [
        "Thank you for being honest about this. It sounds like it's been affecting you a lot. Have you thought about "
        "reaching out to a counsellor or support group?",
        "That takes courage to share. Support for substance use really can help. What's been going on lately?",
    ],
    "clinical.gambling": [
        "Thank you for telling me about this. It sounds like the betting has been costing you a lot, and not only "
        "money. Have you thought about talking to a gambling support line or counsellor?",
        "That takes courage to share. Gambling problems are more common than people think, and support really "
        "can help. What's been happening with it lately?",
    ],
    "clinical.ptsd": [
        "What you're describing sounds like it's been really hard to carry. Trauma-informed professionals can help "
        "with this. How are you managing day to day?",
        "Thank you for telling me. Experiences like that can stay with us in painful ways. Have you been able to talk "
        "with anyone about it?",
    ],
    "soft.ptsd-mild": [
        "It sounds like some of that is still with you. That's a very human response. What tends to bring it back?",
        "Thank you for sharing that. Memories like that can linger. How have you been taking care of yourself?",
    ],
    "soft.mild-gambling": [
        "It sounds like betting has been on your mind. How do you feel about how much you've been playing lately?",
        "Thanks for mentioning that. How does gambling fit into your week these days?",
    ],
    "soft.substance-use": [
        "It sounds like drinking or using has come up for you. How do you feel about it lately?",
        "Thanks for being open about that. What role does it play when things get stressful?",
    ],
    "trauma.fight": [
        "It sounds like something has you ready to fight back, and that anger makes sense. What happened?",
        "I hear how much that's got you fired up. What feels most unfair about it?",
    ],
    "trauma.flight": [
        "It sounds like part of you just wants to get away from all of it. What feels most overwhelming?",
        "Wanting to escape is a natural response to something painful. What are you hoping to get away from?",
    ],
    "trauma.freeze": [
        "It sounds like you've been feeling stuck or numb. That can happen when something is too much. How are you right now?",
        "Feeling frozen is a real response to stress, not a failing. What's been happening when you feel that way?",
    ],
    "trauma.fawn": [
        "It sounds like you've been putting everyone else first to keep the peace. What about your own needs?",
        "I hear how much you try to keep others happy. How does that leave you feeling?",
    ],
    "trauma.generic": [
        "It sounds like something has really shaken you. I'm here. What would help right now?",
    ],
    "grief.existential": [
        "I'm so sorry. It sounds like this loss has left you questioning a lot, even your place in things. I'm here with you.",
        "Grief like this can make the world feel empty. You don't have to find the answers today. What do you miss most?",
    ],
    "grief.severe": [
        "I'm so sorry for your loss. That kind of grief can be overwhelming. How are you getting through the days?",
        "That's such a painful loss. There's no right way to grieve. Would you like to tell me about them?",
    ],
    "grief.spousal": [
        "I'm so sorry. Losing a partner changes everything, even the quiet moments. How are you managing at home?",
        "Losing the person you shared your life with is one of the hardest things. What do you miss most about them?",
    ],
    "grief.moderate": [
        "I'm sorry you're going through this loss. How have you been feeling since it happened?",
        "Grief comes in waves. What has it been like for you lately?",
    ],
    "grief.pet": [
        "I'm so sorry about your {pet}. They really are family. Would you like to share a favourite memory?",
    ],
    "grief.mild": [
        "I'm sorry for your loss. How are you holding up?",
        "That sounds like a loss that matters to you. Would you like to talk about it?",
    ],
    # -------------------------------------------------------------------------
    # Levels 9-14: conversational
    # -------------------------------------------------------------------------
    "defensive.deescalate": [
        "You're right, and I'm sorry if that came across as pushy. You know yourself best. What would you like to talk about?",
        "That's fair. I didn't mean to suggest anything was wrong with you. I'm here to listen.",
        "I hear you, and I'll step back from suggestions. What's on your mind?",
    ],
    "introduction.greeting": [
        "Hi, I'm Roger. I'm a peer support companion, and I'm here to listen. What brings you here today?",
        "Hello, I'm Roger. It's good to meet you. How are you doing today?",
        "Hey there, I'm Roger. Thanks for stopping by. What's on your mind?",
    ],
    "introduction.named": [
        "Hi {name}, I'm Roger. It's good to meet you. What brings you here today?",
        "Nice to meet you, {name}. I'm Roger, and I'm here to listen. How are you doing?",
    ],
    "sharing.acknowledge": [
        "Thank you for sharing that with me.",
        "I appreciate you telling me about this.",
        "That sounds like a lot to carry.",
    ],
    "sharing.first_message_adjectives": [
        "like a lot to handle",
        "really challenging",
        "difficult",
        "like a lot at once",
    ],
    "small_talk.general": [
        "I'm doing alright, thanks for asking. How's your day going?",
        "It's nice to just chat. What's been the best part of your week so far?",
        "Thanks for asking. I'd love to hear how things are going for you.",
        "I like a good coffee myself. What do you do to unwind?",
    ],
    "small_talk.sports": [
        "Oh, the {team}? How do you think they're doing this season?",
        "A {team} fan! Does watching them help you relax, or stress you out?",
    ],
    "small_talk.location": [
        "How do you like living in {location}?",
        "What's life like in {location} these days?",
    ],
    "small_talk.weather": [
        "The weather can really set the mood for a day. How's it been where you are?",
    ],
    "reflection.feeling": [
        "It sounds like you're feeling {feeling}.",
        "I'm hearing that you feel {feeling}.",
        "Feeling {feeling} can be really hard.",
    ],
    "reflection.topic": [
        "It sounds like {topic} has been on your mind.",
        "I hear that things with {topic} have been weighing on you.",
    ],
}


class BuiltinCorpus:
    """In-memory corpus with optional per-pool overrides."""

    def __init__(self, pools: Optional[Dict[str, List[str]]] = None):
        self._pools: Dict[str, List[str]] = {k: list(v) for k, v in DEFAULT_POOLS.items()}
        if pools:
            for key, templates in pools.items():
                self._pools[key] = [t for t in templates if isinstance(t, str) and t.strip()]

        if not self._pools.get(GENERIC_POOL):
            raise GeneratorError("Generic pool must not be empty", pool=GENERIC_POOL, error_type="empty_pool")

    def get_templates(self, pool_key: str) -> List[str]:
        """Copy of the pool (empty list for unknown keys)."""
        return list(self._pools.get(pool_key, []))

    def keys(self) -> List[str]:
        return sorted(self._pools)


def load_corpus(path: Optional[str] = None) -> BuiltinCorpus:
    """
    Build the template corpus.

    Args:
        path: Optional JSON override file (see module docstring)

    Raises:
        GeneratorError: If the override is unreadable or empties the generic pool
    """
    if not path:
        return BuiltinCorpus()

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise GeneratorError("Could not read template corpus", details=str(e), path=path)

    pools = data.get("pools", data) if isinstance(data, dict) else {}
    if not isinstance(pools, dict):
        raise GeneratorError("Template corpus must map pool keys to lists", path=path)

    corpus = BuiltinCorpus({k: v for k, v in pools.items() if isinstance(v, list)})
    logger.info(f"Loaded {len(pools)} template pools from {Path(path).name}")
    return corpus
