"""
crisis: Crisis response generation for a selected alert.

Sub-modules:
    schema         - four-section briefing models and the request JSON schema
    prompt         - incident prompt and GenerationRequest construction
    gemini_client  - httpx client for the structured-output generation service
    orchestrator   - idle/pending/resolved/failed state machine with token fencing
"""
