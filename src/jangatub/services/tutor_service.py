"""Explanations, corrections and exercise assistance from the Groq model.

When the model is not configured or fails, routes answer with the static
French texts built by the ``fallback_*`` helpers.
"""
import logging
from typing import Optional

from src.jangatub.schemas import AssistAction
from src.jangatub.services.ai_service import SYSTEM_PROMPT, DocumentContext, GroqClient

logger = logging.getLogger(__name__)

GENERAL_QUESTION = "Explication générale"

ACTION_LABELS = {
    AssistAction.TRANSCRIBE: "Transcription du sujet",
    AssistAction.EXPLAIN_EXERCISE: "Explication de l'exercice",
    AssistAction.FORMULAS: "Formules et théorèmes",
    AssistAction.METHODOLOGY: "Démarche de résolution",
    AssistAction.FULL_ASSIST: "Assistance complète",
}

# (max_tokens, temperature)
ACTION_SETTINGS = {
    AssistAction.TRANSCRIBE: (4000, 0.3),
    AssistAction.EXPLAIN_EXERCISE: (3000, 0.5),
    AssistAction.FORMULAS: (3000, 0.3),
    AssistAction.METHODOLOGY: (3000, 0.4),
    AssistAction.FULL_ASSIST: (4000, 0.4),
}

ACTION_TASKS = {
    AssistAction.TRANSCRIBE: (
        "Rewrite the paper cleanly and legibly. Number every exercise, part and sub-question, "
        "rephrase ambiguous instructions, list the given data and what is asked for each question, "
        "and say clearly when figures or tables seem to be missing."
    ),
    AssistAction.EXPLAIN_EXERCISE: (
        "Explain the exercise: restate what is asked in simple words, list the data and unknowns, "
        "the course chapters and key definitions involved, the classic traps, and give 2-3 hints "
        "to get started without giving the answer away."
    ),
    AssistAction.FORMULAS: (
        "List every formula, theorem and property needed, with the meaning of each symbol, "
        "its conditions of use and the exact question where it applies."
    ),
    AssistAction.METHODOLOGY: (
        "Give a step-by-step solving method for each question: where to start, which tool to use "
        "at each step, how to check the result. Do not give the final numerical answers."
    ),
    AssistAction.FULL_ASSIST: (
        "Give a complete teaching analysis: a clean transcription of each exercise, the notions "
        "required, the useful formulas, a solving method per question, the traps to avoid and "
        "revision advice."
    ),
}

REVISION_TIPS = """**En attendant, voici quelques conseils :**
1. Relisez attentivement l'énoncé et identifiez les données.
2. Repérez les mots-clés qui indiquent la méthode à utiliser.
3. Consultez votre cours pour retrouver les formules utiles.
4. Procédez étape par étape sans sauter de calculs.
5. Vérifiez vos résultats en les réinjectant dans l'énoncé."""


def _paper_kind(doc: DocumentContext) -> str:
    return "exam paper" if doc.type == "SUBJECT" else "worked correction"


def _source_block(document_content: Optional[str]) -> str:
    if not document_content:
        return ""
    return (
        "\n\nFull text of the document (extracted from the PDF):\n"
        f"---BEGIN DOCUMENT---\n{document_content}\n---END DOCUMENT---\n"
        "Base your answer on this actual text. Do not guess."
    )


class TutorAssistant:
    def __init__(self, client: GroqClient):
        self.client = client

    @property
    def configured(self) -> bool:
        return self.client.configured

    async def _ask(self, prompt: str, *, max_tokens: int, temperature: float) -> str:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        return await self.client.chat(messages, max_tokens=max_tokens, temperature=temperature)

    async def explain_document(
        self,
        doc: DocumentContext,
        question: Optional[str] = None,
        document_content: Optional[str] = None,
        context: Optional[str] = None,
    ) -> str:
        """Answer a student's question about a paper, or analyse the whole paper when none is given."""
        header = f"{doc.describe()} ({_paper_kind(doc)}){_source_block(document_content)}"
        if context:
            header += f"\n\nWhat the student is looking at:\n{context}"

        if question:
            task = (
                f'The student asks:\n"{question}"\n\n'
                "Give a clear, detailed teaching explanation with examples where possible. "
                "Structure the answer with headings and lists."
            )
        else:
            task = (
                "Analyse this document completely:\n"
                "1. Content: which exercises are present, briefly described.\n"
                "2. Topics: which chapters of the curriculum are assessed.\n"
                "3. Skills: what the student must be able to do.\n"
                "4. Method: how to approach each exercise.\n"
                "5. Common mistakes: the traps to avoid.\n"
                "6. Revision advice: how to prepare efficiently.\n\n"
                f"Adapt the answer to the {doc.level} level in Senegal."
            )
        return await self._ask(f"{header}\n\n{task}", max_tokens=3000, temperature=0.7)

    async def correct_answer(
        self,
        doc: DocumentContext,
        exercise_number: str,
        student_answer: str,
        document_content: Optional[str] = None,
    ) -> str:
        prompt = f"""{doc.describe()}{_source_block(document_content)}

The student answered exercise/question **{exercise_number}**:
---
{student_answer}
---

Correct this answer for the student:
1. Assessment: correct, partly correct or incorrect.
2. Strengths: what the student did well.
3. Mistakes: each error with an explanation.
4. Detailed correction: the expected answer step by step.
5. Estimated grade out of 20.
6. Advice: how the student can improve.

Be encouraging but rigorous."""
        return await self._ask(prompt, max_tokens=3000, temperature=0.5)

    async def assist(
        self,
        action: AssistAction,
        doc: DocumentContext,
        exercise_text: Optional[str] = None,
        exercise_number: Optional[str] = None,
        document_content: Optional[str] = None,
    ) -> str:
        """Run one assistance ``action`` on the student's exercise text or on the paper itself."""
        target = exercise_number or "the exercise"
        parts = [f"{doc.describe()} ({_paper_kind(doc)}){_source_block(document_content)}"]
        if exercise_text:
            parts.append(
                f"Text of {target} as copied by the student (it may be badly formatted or incomplete):\n"
                f"---\n{exercise_text}\n---"
            )
        elif document_content:
            parts.append(f"Work on {target} using the document text above.")
        else:
            parts.append(
                f"The paper text is not available. Rely on your knowledge of {doc.subject} papers "
                f"at {doc.level} level in Senegal for the {doc.year} session, and describe the typical "
                "structure and exercises of such a paper."
            )
        parts.append(ACTION_TASKS[action])
        parts.append(f"Use clean Markdown and adapt the answer to the {doc.level} level.")

        max_tokens, temperature = ACTION_SETTINGS[action]
        logger.info(f"Running {action.value} for {doc.title}")
        return await self._ask("\n\n".join(parts), max_tokens=max_tokens, temperature=temperature)


def fallback_explanation(doc: DocumentContext, question: Optional[str] = None) -> str:
    kind = "Sujet d'examen" if doc.type == "SUBJECT" else "Corrigé détaillé"
    text = f"""## Analyse de "{doc.title}"

### 📚 Informations
- **Matière** : {doc.subject}
- **Niveau** : {doc.level}
- **Année** : {doc.year}
- **Type** : {kind}
"""
    if question:
        text += f"""
### ❓ Votre question
"{question}"

Cette question concerne un concept clé en {doc.subject}. L'explication IA détaillée est indisponible pour le moment.
"""
    return text + """
### 🎯 Conseils de méthodologie
1. Lisez attentivement l'énoncé avant de commencer.
2. Identifiez les mots-clés de chaque question.
3. Gérez votre temps proportionnellement aux points.
4. Rédigez proprement et structurez vos réponses.
5. Vérifiez vos calculs et relisez-vous."""


def fallback_correction(exercise_number: str, student_answer: str) -> str:
    return f"""## Correction de l'exercice {exercise_number}

Votre réponse a été reçue. L'IA est temporairement indisponible pour la corriger.

### Votre réponse :
{student_answer}

### 📝 Points de vérification
1. **Structure** : Votre réponse est-elle bien structurée ?
2. **Justification** : Avez-vous justifié chaque étape ?
3. **Calculs** : Vos calculs sont-ils vérifiés ?
4. **Unités** : Les unités sont-elles correctes ?

Comparez votre réponse avec le corrigé officiel disponible dans la bibliothèque."""


def fallback_assist(
    action: AssistAction,
    doc: DocumentContext,
    exercise_text: Optional[str] = None,
    exercise_number: Optional[str] = None,
) -> str:
    label = ACTION_LABELS[action]
    text = f"""## {label}

### 📚 Document
- **Titre** : {doc.title}
- **Matière** : {doc.subject}
- **Niveau** : {doc.level}
- **Année** : {doc.year}
"""
    if exercise_number:
        text += f"\n### 📝 {exercise_number}\n"
    if exercise_text:
        text += f"\n### Texte fourni\n{exercise_text}\n"
    return text + f"""
### ℹ️ Information
L'IA est temporairement indisponible pour fournir une {label.lower()}.

{REVISION_TIPS}"""


def get_tutor() -> TutorAssistant:
    return TutorAssistant(GroqClient())
