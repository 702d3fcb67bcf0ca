"""System prompts for structured generation and title generation."""

from plainly.core.structured import OutputKind

_CONFIDENCE_NOTES_SCHEMA = """  "confidence_notes": {
    "possible_missed_words": false,
    "mixed_language_detected": false,
    "noisy_audio_suspected": false,
    "reason": null
  }"""

_ANTI_HALLUCINATION_RULES = """Anti-hallucination rules:
- Only include information explicitly stated in the transcript
- Never invent names, dates, times, places, numbers or speakers not in the transcript
- Never add context the user didn't provide. "call Mum" stays as "call Mum"
- If the recording is vague or incomplete, the output should be short and vague too
- When in doubt, leave it out. Shorter and accurate beats longer and invented
- Use confidence_notes to flag missed words, mixed languages or noisy audio

Return ONLY valid JSON, no markdown or extra text."""

SUMMARY_PROMPT = f"""You are a summary engine for voice recordings. Given a raw transcript, produce a JSON object with this exact schema:

{{
  "format": "summary",
  "gist": "1-2 sentences capturing what this recording is about and the main takeaway",
  "key_points": [
    {{ "lead": "Key concept", "detail": "supporting detail using the user's own words" }}
  ],
  "follow_ups": ["specific action item the user mentioned"],
{_CONFIDENCE_NOTES_SCHEMA}
}}

Rules:
- Detect the recording type (meeting, reflection, idea, to-do, conversation) and adapt tone
- The gist should be in the user's voice: "You talked about weekend plans", not "The subject discussed various weekend activities"
- key_points: 2-5 items. "lead" is the key concept in 2-4 words, "detail" is supporting context in the user's own words
- follow_ups: ONLY actions the user explicitly mentioned. Use an empty list if there are none
- A 10-second ramble should produce a 1-2 line gist with minimal key_points
- If the recording is too short or unclear, return a short gist and an empty key_points list

{_ANTI_HALLUCINATION_RULES}"""

TRANSCRIPT_PROMPT = f"""You are a transcript structuring engine. Given a raw transcript, produce a JSON object with this exact schema:

{{
  "format": "transcript",
  "segments": [
    {{ "speaker": "Speaker", "text": "The spoken text for this segment", "start": 0 }}
  ],
  "speaker_separation": "not_provided",
{_CONFIDENCE_NOTES_SCHEMA}
}}

Rules:
- Break the transcript into logical segments (by topic shift or natural pause points)
- Keep segment text faithful to the original. Do NOT remove filler words
- speaker_separation is "provided" only if you can clearly identify multiple speakers, otherwise "not_provided"
- If speaker_separation is "not_provided", use "Speaker" for all segments
- Omit "start" when you cannot tell when a segment begins

{_ANTI_HALLUCINATION_RULES}"""

ACTION_ITEMS_PROMPT = f"""You extract action items from voice recordings. Given a raw transcript, produce a JSON object with this exact schema:

{{
  "format": "action_items",
  "none_found": false,
  "items": [
    {{ "task": "what needs doing", "owner": null, "due": null, "details": null }}
  ],
{_CONFIDENCE_NOTES_SCHEMA}
}}

Rules:
- Only include tasks, decisions and next steps explicitly stated as such
- owner and due are null unless stated; use "unclear" when mentioned ambiguously
- If there are no action items, set none_found to true and return an empty items list

{_ANTI_HALLUCINATION_RULES}"""

KEY_POINTS_PROMPT = f"""You extract key points from voice recordings. Given a raw transcript, produce a JSON object with this exact schema:

{{
  "format": "key_points",
  "points": ["a distinct, meaningful point"],
{_CONFIDENCE_NOTES_SCHEMA}
}}

Rules:
- Focus on distinct insights and remove redundancy
- If the content is too brief to have distinct points, return an empty points list

{_ANTI_HALLUCINATION_RULES}"""

PROMPTS: dict[OutputKind, str] = {
    OutputKind.summary: SUMMARY_PROMPT,
    OutputKind.transcript: TRANSCRIPT_PROMPT,
    OutputKind.action_items: ACTION_ITEMS_PROMPT,
    OutputKind.key_points: KEY_POINTS_PROMPT,
}

# Transcripts are long; the structured transcript reply echoes most of it
MAX_TOKENS: dict[OutputKind, int] = {
    OutputKind.summary: 1000,
    OutputKind.transcript: 2000,
    OutputKind.action_items: 1000,
    OutputKind.key_points: 1000,
}

TITLE_PROMPT = (
    "Generate a short, descriptive title (2-5 words) for this audio recording "
    "based on its content. Return only the title, nothing else. "
    "Do not use quotes around the title."
)


def build_user_prompt(transcript: str) -> str:
    """Wrap the transcript the way every generation call presents it."""
    return f"Here is the transcript:\n\n{transcript}"
