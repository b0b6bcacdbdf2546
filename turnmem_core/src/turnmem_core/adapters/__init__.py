"""Backends that store conversation deltas inside third-party frameworks.

Available adapters:
    - LangChainHistoryBackend: Stores deltas in a LangChain BaseChatMessageHistory.

Usage:
    ```python
    from langchain_core.chat_history import InMemoryChatMessageHistory
    from turnmem_core.adapters.langchain import LangChainHistoryBackend

    backend = LangChainHistoryBackend(InMemoryChatMessageHistory())
    ```
"""
