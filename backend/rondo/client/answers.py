from typing import Any, Dict, List, Optional

QUESTION_NOT_FOUND = 'Question not found'


def normalize(text: Optional[str]) -> str:
    return (text or '').strip().lower()


def accepted_answers(entry: Optional[Dict[str, Any]]) -> List[str]:
    """All accepted answers of a question across languages, normalized."""
    if not entry:
        return []
    answers = entry.get('answer') or {}
    values = answers.values() if isinstance(answers, dict) else [answers]
    out = []
    for value in values:
        for ans in (value if isinstance(value, (list, tuple)) else [value]):
            ans = normalize(ans if isinstance(ans, str) else None)
            if ans:
                out.append(ans)
    return out


def is_correct(user_answer: str, entry: Optional[Dict[str, Any]]) -> bool:
    """Exact match, or equal to one word of a multi-word accepted answer."""
    answer = normalize(user_answer)
    if not answer:
        return False
    for accepted in accepted_answers(entry):
        if answer == accepted or answer in accepted.split():
            return True
    return False


def question_text(entry: Optional[Dict[str, Any]], lang: str) -> str:
    question = (entry or {}).get('question') or {}
    if isinstance(question, dict) and question.get(lang):
        return question[lang]
    return QUESTION_NOT_FOUND
