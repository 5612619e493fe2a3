"""Language model provider for delegated billing decisions."""

from llama_index.core.llms import LLM

from .config import EngineSettings, get_settings


def get_llm(settings: EngineSettings | None = None) -> LLM:
    """LLM for delegated unit allocation and SOAP drafting."""
    from llama_index.llms.openai import OpenAI

    settings = settings or get_settings()
    return OpenAI(model=settings.llm_model, temperature=settings.llm_temperature)
