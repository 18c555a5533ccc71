"""
Prompt builders for lesson, assistant and image generation.
"""
from typing import Dict

from configs import IMAGE_STYLE_SUFFIX

from .models import LessonLevel


# ============================================================
# LEVEL NORMALIZATION
# ============================================================

# Checked in this order; first containment match wins
LEVEL_SYNONYMS = [
    (LessonLevel.BEGINNER, ("beginner", "easy", "basic", "novice", "intro")),
    (LessonLevel.INTERMEDIATE, ("intermediate", "medium", "moderate")),
    (LessonLevel.ADVANCED, ("advanced", "hard", "expert")),
]


def normalize_level(level: str) -> LessonLevel:
    """
    Map a free-form level string onto a LessonLevel.

    Matching is a case-insensitive substring check ("Hard mode" -> advanced).
    Unrecognized or empty values default to beginner.
    """
    lowered = (level or "").strip().lower()
    for target, synonyms in LEVEL_SYNONYMS:
        if any(word in lowered for word in synonyms):
            return target
    return LessonLevel.BEGINNER


LEVEL_CONTEXT: Dict[LessonLevel, Dict[str, str]] = {
    LessonLevel.BEGINNER: {
        "depth": (
            "Assume ZERO prior knowledge. Use very simple language, everyday analogies, and avoid jargon. "
            "Focus on the 'what' and 'why'. Build a solid mental model from scratch."
        ),
        "steps": "5-6 steps",
        "quiz_style": "simple recognition and recall questions",
        "resources_style": "beginner-friendly YouTube videos, simple articles, and introductory books",
    },
    LessonLevel.INTERMEDIATE: {
        "depth": (
            "Assume the student knows the basics. Go deeper into the 'how'. Introduce technical terms with "
            "clear definitions. Cover edge cases, common mistakes, and practical patterns."
        ),
        "steps": "6-7 steps",
        "quiz_style": "application and comprehension questions that require understanding, not just recall",
        "resources_style": "official documentation, intermediate tutorials, practice projects, and technical blogs",
    },
    LessonLevel.ADVANCED: {
        "depth": (
            "Assume strong foundational knowledge. Explore why things work the way they do at a deep level. "
            "Cover internals, performance, trade-offs, design patterns, and expert-level nuances."
        ),
        "steps": "7-8 steps",
        "quiz_style": "analysis and synthesis questions requiring critical thinking and expert judgment",
        "resources_style": "research papers, advanced books, source code repositories, conference talks, and expert blogs",
    },
}


# ============================================================
# LESSON PROMPT
# ============================================================

LESSON_JSON_SHAPE = """{
  "introduction": "A compelling hook that acknowledges the student's current level and what they will master",
  "introduction_visual": "Detailed cinematic English prompt for a cover image representing this topic",
  "key_concepts": ["concept1", "concept2", "concept3", "concept4"],
  "steps": [
    {
      "title": "Step title",
      "explanation": "Rich explanation using Markdown with **bold**, bullet points, and code blocks where relevant",
      "visual_description": "Detailed English prompt for an educational diagram/illustration for this concept",
      "real_world": "A concrete real-world example or application of this concept",
      "resources": [
        {
          "type": "video",
          "title": "Specific video for this step",
          "description": "Why this video helps with THIS step",
          "url": "https://www.youtube.com/results?search_query=specific+step+topic",
          "difficulty": "<level>"
        }
      ],
      "quiz": {
        "question": "The question",
        "options": ["Option A", "Option B", "Option C", "Option D"],
        "answer": "The exact correct option string",
        "hint": "A helpful hint that guides without giving away the answer",
        "explanation": "Brief explanation of WHY the answer is correct"
      }
    }
  ],
  "summary": "Concise recap of all key points covered",
  "final_motivation": "Inspiring, level-appropriate closing message",
  "resources": [
    {
      "type": "article",
      "title": "Resource title",
      "description": "Brief description",
      "url": "https://www.google.com/search?q=specific+topic+guide",
      "difficulty": "<level>"
    }
  ]
}"""


def build_lesson_prompt(topic: str, level: LessonLevel, language: str) -> str:
    """Build the single structured prompt for a lesson."""
    ctx = LEVEL_CONTEXT.get(level, LEVEL_CONTEXT[LessonLevel.BEGINNER])
    shape = LESSON_JSON_SHAPE.replace("<level>", level.value)

    return f"""You are a world-class AI educator. Create a comprehensive, level-calibrated "Guided Learning Journey".

TOPIC: "{topic}"
LEVEL: "{level.value}"
LANGUAGE: {language}

LEVEL CALIBRATION RULES (follow exactly):
- {ctx['depth']}
- Number of steps: {ctx['steps']}
- Quiz style: {ctx['quiz_style']}
- Resources style: {ctx['resources_style']}

CONTENT REQUIREMENTS:
1. Each step teaches ONE distinct concept, going progressively deeper.
2. Steps must be unique and must not repeat information from other steps.
3. Complexity, vocabulary and depth must match the {level.value} level.
4. Include real-world applications and concrete examples.
5. The entire response (except visual descriptions and URLs) must be in {language}.
6. Every quiz has exactly 4 options and "answer" is copied verbatim from "options".

Format the response as a single valid JSON object with this EXACT structure:
{shape}

Return ONLY the JSON object. No markdown fences, no extra text.
URL RULE: every URL must be either a real, specific link or a highly targeted search URL
(e.g. https://www.youtube.com/results?search_query=specific+topic+name).
NEVER return bracketed placeholders like "[topic]" or bare domains like "https://youtube.com/"."""


# ============================================================
# ASSISTANT PROMPT
# ============================================================

ASSISTANT_PERSONA = """Act as a cool, friendly Moroccan "Darija Buddy".
Your goal is to explain educational concepts or respond to the user in a casual, helpful and street-smart way using Moroccan Darija.
- Use words like "khoya/khti", "sat", "mousalsal", "fhamti".
- Keep it encouraging and funny.
- When asked for an explanation, break it down with real-life Moroccan analogies (hanout, taxi, football).
- Latin characters (Arabizi) or Arabic script are both fine, but keep it readable.
Respond directly as the buddy. No preamble."""


def build_assistant_prompt(text: str) -> str:
    return f'{ASSISTANT_PERSONA}\n\nUser says: "{text}"'


# ============================================================
# IMAGE PROMPT
# ============================================================

def build_image_prompt(description: str, style_suffix: str = IMAGE_STYLE_SUFFIX) -> str:
    """Append the fixed stylistic suffix to an English image description."""
    description = (description or "").strip().rstrip(".")
    if not style_suffix:
        return description
    return f"{description}. {style_suffix}"
