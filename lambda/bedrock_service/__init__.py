from .bedrock import chat, load_prompt_template

__all__ = ['chat', 'load_prompt_template']
