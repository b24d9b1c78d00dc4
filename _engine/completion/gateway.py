from _data.openai import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from _data.prompts import LANGUAGE_INSTRUCTION, SUMMARIZE_INSTRUCTION
from _engine.completion.client import CompletionClient
from _engine.console import console


def generate_language_instruction(language_code: str) -> str:
    """Instruction asking the model to answer in the configured language."""
    language = SUPPORTED_LANGUAGES.get(language_code) or SUPPORTED_LANGUAGES[DEFAULT_LANGUAGE]
    return LANGUAGE_INSTRUCTION.format(language=language)


class SummarizationGateway:
    """Reduces one blob of text to a short technical summary."""

    def __init__(self, client: CompletionClient, language: str):
        self.client = client
        self.language = language

    def summarize(self, text: str) -> str:
        prompt = SUMMARIZE_INSTRUCTION.format(
            language_instruction=generate_language_instruction(self.language),
            text=text,
        )
        console.print(f"[dim]📤 Sending summarization request ({len(text):,} chars)...[/dim]")
        try:
            summary = self.client.complete(prompt)
        except Exception as e:
            console.print(f"[error]❌ Error while summarizing text:[/error] {e}")
            raise
        console.print("[dim]✅ Summary received.[/dim]")
        return summary
