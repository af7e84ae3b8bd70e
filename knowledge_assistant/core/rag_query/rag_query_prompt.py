"""
RAG query prompts.

Templates for the grounded answer, the no-context fallback reply and
query expansion.

Dependencies: langchain_core.prompts
System role: Prompt templates for the RAG query orchestrator
"""

from langchain_core.prompts import PromptTemplate

from knowledge_assistant.models.rag import RagSource

STATIC_FALLBACK_RESPONSE = (
    "I don't have information about that in the current documentation. "
    "Please contact HR or your manager for more specific guidance."
)

ANSWER_TEMPLATE = PromptTemplate.from_template(
    """You are an onboarding assistant for the company. Answer the following question based ONLY on the provided documentation.

DOCUMENTATION CONTEXT:
{context}
{history}
USER QUESTION:
{question}

INSTRUCTIONS:
- Provide a brief summary (1-2 sentences) directly answering the question
- Organize detailed information into logical sections
- Each section should have a type: "info" (general), "steps" (procedures), "warning" (important notes), "tip" (helpful advice)
- Include key takeaways as bullet points when relevant
- Suggest related topics the user might want to explore
- Use markdown formatting within section content
- Respond in the SAME LANGUAGE as the user's question
- If the documentation doesn't fully cover the topic, be transparent about it"""
)

FALLBACK_TEMPLATE = PromptTemplate.from_template(
    """You are an onboarding assistant for a company. The user asked a question, but there are NO relevant documents available to answer it.
{sector_context}
USER QUESTION: "{question}"

INSTRUCTIONS:
- Acknowledge that you don't have specific information about this topic in the available documentation
- Be empathetic and helpful in your response
- Suggest general alternatives (e.g., contact HR, check the company intranet, ask their manager)
- If the question seems related to common onboarding topics, mention that the documentation might not have been uploaded yet
- Keep the response concise (2-3 sentences max)
- Respond in the SAME LANGUAGE as the user's question

RESPONSE:"""
)

QUERY_EXPANSION_TEMPLATE = PromptTemplate.from_template(
    """You are a query expansion assistant for a company knowledge base. Your job is to ENRICH a user's short question so that a vector similarity search can find more relevant documents.

USER QUERY: "{question}"

INSTRUCTIONS:
- Add synonyms, related terms, and contextual keywords that documents might contain
- Keep the original intent intact
- Include the original keywords
- Respond in the SAME LANGUAGE as the user's query
- Return ONLY the expanded query text, nothing else (no explanations, no quotes)
- Keep it to a single paragraph (max 50 words)

EXPANDED QUERY:"""
)


def format_sources(sources: list[RagSource]) -> str:
    """Number sources from 1 in ranking order: "[i] content"."""
    return "\n\n".join(f"[{i}] {source.content}" for i, source in enumerate(sources, start=1))


def build_answer_prompt(
    question: str,
    sources: list[RagSource],
    conversation_context: str = "",
) -> str:
    history = ""
    if conversation_context.strip():
        history = f"\nCONVERSATION HISTORY:\n{conversation_context.strip()}\n"
    return ANSWER_TEMPLATE.format(
        context=format_sources(sources),
        history=history,
        question=question,
    )


def build_fallback_prompt(question: str, sector_name: str | None = None) -> str:
    sector_context = ""
    if sector_name:
        sector_context = (
            f'\nThe user is asking in the context of the "{sector_name}" department/sector.\n'
        )
    return FALLBACK_TEMPLATE.format(sector_context=sector_context, question=question)


def build_query_expansion_prompt(question: str) -> str:
    return QUERY_EXPANSION_TEMPLATE.format(question=question)
