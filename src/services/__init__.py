"""Business-logic services for the chat gateway.

- chat_gateway       -- request orchestration: normalize, retrieve, invoke,
                        fall back, emit
- model_routing      -- model id → provider and upstream model name
- retriever          -- knowledge-base lookup for the system prompt
- fallback_responder -- rule-based demo replies
- stream_framing     -- outward server-sent-event framing
- stream_registry    -- supersession of in-flight streams per session
- ingestion/         -- chunking and document ingestion
"""
