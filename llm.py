import json
import logging
import os

import boto3

from errors import ErrorKind, TutorError
from request import RemoteRequest

log = logging.getLogger(__name__)

DEFAULT_MODEL = "us.anthropic.claude-sonnet-4-20250514-v1:0"
EMPTY_REPLY = "I'm sorry, I couldn't generate a response. Please try again."

SYSTEM_INSTRUCTION = """\
You are "The Socratic Whiteboard", an expert AI tutor.
Your goal is to GUIDE the student, NEVER to give the answer immediately.

### BEHAVIORAL RULES (THE TUTOR LOGIC)
1. **Analyze First**: When an image is uploaded (math, chemistry, physics, etc.), analyze it carefully. Identify the specific mistake or the next logical step.
2. **Socratic Method**: Ask one leading question to help the student realize the solution themselves. Do not just solve it.
3. **Multimodal**: You can read messy handwriting and diagrams. If it's truly illegible, politely ask for a clearer photo.
4. **Tone**: Encouraging, patient, concise, and curious. No long lectures.
5. **Formatting**:
   - Use LaTeX for ALL math equations.
   - Inline math: $ E = mc^2 $ (wrapped in single dollar signs).
   - Block math: $$ x = \\frac{-b \\pm \\sqrt{b^2 - 4ac}}{2a} $$ (wrapped in double dollar signs).

### INTERACTION GUIDE
- If the student asks "What is the answer?", respond with: "Let's break it down. What do you think the first step is?"
- If the student uploads a blank problem, ask them how they would start.
- If the student uploads a partial attempt, find the first error and ask a question about it.
"""


class LLM:
    """Bedrock client for the tutor model.

    Construct once at startup and reuse for every turn; the boto3 client is
    created here and never re-initialized.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        aws_region: str = "us-east-1",
        temperature: float = 0.7,
        max_tokens: int = 4096,
        client=None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        if client is None:
            # Map BEDROCK_TOKEN to the env var boto3 expects for API key auth
            token = os.environ.get("BEDROCK_TOKEN")
            if token:
                os.environ["AWS_BEARER_TOKEN_BEDROCK"] = token
            client = boto3.client("bedrock-runtime", region_name=aws_region)
        self.client = client

    def complete(self, request: RemoteRequest) -> str:
        """Send one request and return the reply text. Raises TutorError on any failure."""
        body = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": self.max_tokens,
            "system": SYSTEM_INSTRUCTION,
            "temperature": self.temperature,
            "messages": list(request.messages),
        }
        try:
            response = self._invoke(body)
        except Exception as e:
            log.error("Bedrock call failed: %s", e)
            raise TutorError(ErrorKind.REMOTE_CALL_FAILURE, "Failed to communicate with the tutor.") from e

        text = "".join(
            b["text"] for b in response.get("content", []) if b.get("type") == "text"
        )
        return text or EMPTY_REPLY

    def _invoke(self, body: dict) -> dict:
        response = self.client.invoke_model(
            modelId=self.model,
            body=json.dumps(body),
        )
        return json.loads(response["body"].read())
