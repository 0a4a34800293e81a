"""Local fallback judge used when no judging service is configured."""
from __future__ import annotations

from collections import Counter

from debate_room.application.dto.transcript import Transcript


class TranscriptJudge:
    """Awards the debate to whoever put forward more argument.

    Text counts by words; each audio contribution counts as one argument.
    """

    async def judge(self, transcript: Transcript) -> str:
        scores: Counter[str] = Counter({pid: 0 for pid in transcript.participants})
        names = dict(transcript.participants)
        for entry in transcript.entries:
            names.setdefault(entry.speaker_id, entry.speaker_name)
            if entry.text:
                scores[entry.speaker_id] += len(entry.text.split())
            elif entry.has_audio:
                scores[entry.speaker_id] += 1

        ranked = scores.most_common()
        if not ranked or ranked[0][1] == 0:
            return f'No arguments were made on "{transcript.topic}", so there is no winner.'
        if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
            return f'The debate on "{transcript.topic}" is a tie.'
        winner_id, score = ranked[0]
        return f'{names[winner_id]} wins the debate on "{transcript.topic}" ({score} points).'
