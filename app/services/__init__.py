"""
Services layer for the PromptBook application.
Contains business logic and orchestration for meta prompt generation.
"""
