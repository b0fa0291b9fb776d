"""Vector store boundary for the admin console.

Everything that talks to the hosted vector-store service lives here:

- provider: abstract async interface to the external service
- openai_store: implementation on top of the official OpenAI SDK
- service: thin pass-through layer (attribute validation, upload flow)
- router: the /api/vector_stores proxy endpoints

SDK exceptions never leave the provider; callers only see RemoteFailure.
"""
