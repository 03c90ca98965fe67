"""Prompt templates for the content generation flows."""

PASSAGE_CONTEXT = """\
You write reading passages for Vietnamese primary school students learning English
(CEFR A1/A2) with the "Tiếng Anh 5 i-Learn Smart Start" course books.
Write a friendly first-person passage narrated by a child with a Vietnamese name
(for example Hoa, Linh, Minh or An). Use short, clear sentences.

Rules:
1. Build the passage on the current unit's vocabulary and sentence patterns.
2. Words and patterns from earlier units may appear for fluency, never as the focus.
3. Work the requested topic into the unit's theme.
4. Return only the passage text, without a title or commentary.
"""

PASSAGE_WITH_KNOWLEDGE = """\
Curriculum unit: {unit_title}
Topic: {topic}
Length: {word_count}

Current unit focus:
- Vocabulary: {current_vocabulary}
- Sentence patterns: {current_patterns}

Allowed from this and earlier units:
- Vocabulary: {vocabulary}
- Sentence patterns: {patterns}
"""

PASSAGE_WITHOUT_KNOWLEDGE = """\
Topic: {topic}
Length: {word_count}
"""

QUESTIONS_CONTEXT = """\
You write English reading comprehension questions for Vietnamese primary school
students (CEFR A1/A2).

Difficulty levels:
- easy: the answer is stated directly in one sentence of the passage.
- medium: needs a simple inference across one or two sentences.
- hard: needs the main idea of the whole passage.

Questions and especially answers must rely on the current unit's vocabulary and
sentence patterns when they are given.

Output a JSON object {"questions": [...]} whose items use exactly one of these shapes:
- {"type": "mcq", "question": "...", "options": [{"text": "...", "isCorrect": true}, ...], "difficulty": "easy"}
  with exactly 3 options and exactly one correct option;
- {"type": "fib", "question": "sentence with ___ for the blank", "answer": "...", "difficulty": "medium"};
- {"type": "true-false", "statement": "...", "isTrue": false, "difficulty": "hard"}.
"""

QUESTIONS_REQUEST = """\
Passage:
---
{passage}
---
{knowledge}
Generate {total} questions of type "{question_type}":
- easy: {easy}
- medium: {medium}
- hard: {hard}
"""

QUESTIONS_KNOWLEDGE = """
Curriculum unit: {unit_title}
Target vocabulary: {current_vocabulary}
Target sentence patterns: {current_patterns}
"""

ILLUSTRATION_STYLE = (
    "A clean, vibrant clipart-style illustration with bold black outlines and "
    "simple flat colors, isolated on a plain white background."
)

CHARACTER_STYLE = (
    "Clipart-style single character for a children's storybook, standing still and "
    "looking forward, full body. Bold black outlines, simple flat colors, plain background."
)

NEGATIVE_PROMPT = (
    "text, labels, words, numbers, watermarks, logos, borders, frames, multiple subjects, "
    "photorealistic, 3D, gradients, textures, watercolor, clutter"
)

FRAME_WITH_CHARACTER = (
    "Place this character in the following scene, keeping the same style: {frame}. "
    "Keep the background simple. Avoid: {negative}"
)

FRAME_WITHOUT_CHARACTER = "{style}\nSubject: a single, clear image of {frame}.\nAvoid: {negative}"

CHARACTER_IMAGE = "{style}\nThe character is: {character}.\nAvoid: {negative}"

CONCRETIZE = """\
You improve prompts for an image model that draws educational clipart for children
(bold black outlines, flat colors, white background). Turn each short prompt into a
simple, concrete English scene description with one clear subject.
For example "butter" becomes "a piece of yellow butter on a white plate".

Return a JSON object {{"concretizedPrompts": [...]}} with exactly one entry per input,
in the same order.

Prompts:
{prompts}
"""

SHUFFLE = """\
Shuffle the words of this English sentence into a random order.
Separate the shuffled words with " / " and drop the final punctuation mark.
For example "I go to school." can become "go / I / school / to".

Return a JSON object {{"shuffledSentence": "..."}}.

Sentence:
{sentence}
"""

TRANSCRIBE = "Transcribe this audio. Only return the transcribed text."
