"""Grounding prompt assembly.

The system prompt embeds the open document's metadata and its full extracted
text so every reply can reference it. Building it has no side effects.
"""

from pdf_chat.chat.config import PromptConfig
from pdf_chat.documents.context import DocumentContext

ASSISTANT_ROLE = "You are a helpful assistant that helps users understand PDF documents."


def _document_body(context: DocumentContext, max_chars: int | None) -> str:
    text = context.extracted_text
    if max_chars is None or len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}\n[... document truncated after {max_chars} characters ...]"


def build_system_prompt(
    context: DocumentContext | None,
    config: PromptConfig | None = None,
) -> str:
    """Build the system-role instructions for the next completion request.

    Args:
        context: The open document, or None when nothing is loaded.
        config: Language, date format and optional truncation settings.

    Returns:
        Instruction text. With a document it contains the file name, page
        count, ingestion date and the document text verbatim.
    """
    config = config or PromptConfig()
    language = config.response_language

    if context is None:
        return (
            f"{ASSISTANT_ROLE} Provide clear and concise responses based on the "
            f"document content. Respond in {language} language."
        )

    uploaded = context.ingested_at.strftime(config.date_format)
    body = _document_body(context, config.max_document_chars)

    return f"""{ASSISTANT_ROLE}

CURRENT PDF DOCUMENT INFORMATION:
- File Name: {context.source_name}
- Number of Pages: {context.page_count}
- Upload Date: {uploaded}

DOCUMENT CONTENT:
{body}

Based on this document content, please provide clear and helpful responses to user questions in {language} language. Always reference the document when answering questions about its content. If asked about what PDF is open, mention the filename "{context.source_name}"."""
