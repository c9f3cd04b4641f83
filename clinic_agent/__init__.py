"""
Clinic Voice Agent - custom LLM bridge between a telephony voice platform and OpenAI

This application answers phone calls for a dental clinic receptionist agent. The
voice platform handles speech recognition, speech synthesis and turn-taking, and
opens one WebSocket per call to this server. For every caller turn the server
streams an OpenAI chat completion back as text, and lets the model check
availability, book and cancel appointments through the clinic's scheduling
webhook before narrating the outcome.

Architecture Overview:
- FastAPI server exposing the per-call WebSocket and the lifecycle webhook
- Streaming chat completions with tool calling, relayed chunk by chunk
- Bounded tool rounds within a single response turn
- Per-call session state that lives exactly as long as the connection

Key Components:
- bot: completion orchestrator, tool declarations and prompts
- config: constants, logging setup and environment settings
- handlers: interaction handlers and lifecycle notification handling
- models: protocol schemas, stream events and call session state
- services: scheduling webhook client and webhook signature verification
- websocket_manager: connection lifecycle and message routing

Getting Started:
1. Set up environment variables (or a .env file):
   - RETELL_API_KEY: voice platform API key (also signs lifecycle webhooks)
   - OPENAI_API_KEY: OpenAI API key
   - N8N_WEBHOOK_URL: scheduling webhook URL
   - PORT: Port to run the server on (default 3000)
   - LOG_LEVEL: Logging level (default INFO)

2. Start the server:
   ```bash
   python run.py
   ```

3. Point the voice platform's custom LLM URL at
   ws://your-server:3000/llm-websocket and its webhook at
   http://your-server:3000/webhook
"""
