"""Minimal demonstration: ask several models the same questions in parallel.

Keys are read from the environment / .env / config.yaml
(OPENAI_API_KEY, MISTRAL_API_KEY, ANTHROPIC_API_KEY).
"""

import random

from multi_ai_client import APIType, ModelDefinition, MultiAIClient
from multi_ai_client.api.service import collect_responses
from multi_ai_client.config.settings import settings


def build_client() -> MultiAIClient:
    client = MultiAIClient()
    candidates = [
        ("Claude", APIType.ANTHROPIC, settings.anthropic_api_key, "claude-3-opus-20240229"),
        ("GPT4", APIType.OPENAI, settings.openai_api_key, "gpt-4-turbo-preview"),
        ("Mistral Large", APIType.MISTRAL, settings.mistral_api_key, "mistral-large-latest"),
    ]
    for name, api_type, key, model in candidates:
        if not key:
            continue
        definition = ModelDefinition.create(name, api_type, key, model)
        definition.model_settings.set("temperature", 0.8)
        client.add_model_definition(definition)
    return client


def ask(client: MultiAIClient, prompt: str) -> None:
    names = [d.name for d in client.model_definitions]
    count, feed = client.create_response_with_prompt(prompt)
    responses = collect_responses(count, feed)
    for name, text in zip(names, responses):
        print(f"--- {name} ---\n{text}\n")
    # 随机保留一条回复作为对话历史
    choice = random.choice(responses)
    client.chat.add_assistant_message(choice)
    print("Chose response:", choice, "\n")


if __name__ == "__main__":
    client = build_client()
    client.chat.set_system_message(
        "You are a helpful assistant. You can help me by answering my questions. You can also ask me questions."
    )
    ask(client, "What is the capital of France?")
    ask(client, "What is interesting there? Answer with at most 1 paragraph.")
    print(client)
