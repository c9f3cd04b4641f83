"""
Services module for external integrations of the clinic voice agent.

Key components:
- scheduling_client: httpx client for the downstream scheduling webhook that
  checks availability, books and cancels appointments.
- webhook_verifier: signature check for lifecycle notifications posted by the
  voice platform.

Usage examples:
```python
from clinic_agent.services.scheduling_client import SchedulingWebhookClient
from clinic_agent.services.webhook_verifier import verify_signature

client = SchedulingWebhookClient("https://n8n.example.com/webhook/clinic")
message = await client.execute("check_availability", {"date": "2024-05-02"})

if not verify_signature(raw_body, api_key, request.headers.get("x-retell-signature")):
    ...
```
"""
