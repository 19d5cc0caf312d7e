"""
Centralized AI Service Manager
Handles Claude API calls with retry logic, error handling, and configuration management
"""
import time
import logging
from typing import Optional, Dict, Any, List, Tuple, Type
from functools import wraps

import anthropic

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Base exception for AI service errors"""
    pass


class AIServiceUnavailable(AIServiceError):
    """Raised when AI service is not configured or unavailable"""
    pass


class AIServiceTimeout(AIServiceError):
    """Raised when AI service times out"""
    pass


def retry_on_failure(max_attempts=3, delay=2, backoff=2,
                     retry_on: Tuple[Type[Exception], ...] = (Exception,)):
    """
    Decorator to retry function on failure with exponential backoff

    Args:
        max_attempts: Maximum number of attempts (1 = no retry)
        delay: Initial delay between retries (seconds)
        backoff: Multiplier for delay on each retry
        retry_on: Exception types that trigger another attempt
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            current_delay = delay
            attempts = max(1, max_attempts)

            for attempt in range(attempts):
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    logger.warning(
                        f"Attempt {attempt + 1}/{attempts} failed for {func.__name__}: {str(e)}"
                    )
                    if attempt == attempts - 1:
                        logger.error(f"All {attempts} attempts failed for {func.__name__}")
                        raise

                    logger.info(f"Retrying in {current_delay} seconds...")
                    time.sleep(current_delay)
                    current_delay *= backoff

        return wrapper
    return decorator


class AIService:
    """
    Centralized AI service manager with retry logic and error handling
    """

    def __init__(self, config, client=None):
        """
        Initialize AI service with configuration

        Args:
            config: Flask app configuration (mapping)
            client: Pre-built Anthropic client; built from ANTHROPIC_API_KEY when omitted
        """
        self.config = config
        self.anthropic_client = client

        if self.anthropic_client is None:
            self._initialize_client()

    def _initialize_client(self):
        """Initialize the Anthropic client when an API key is configured"""
        api_key = self.config.get('ANTHROPIC_API_KEY')
        if not api_key:
            logger.warning("ANTHROPIC_API_KEY not set - invoice extraction disabled")
            return

        self.anthropic_client = anthropic.Anthropic(
            api_key=api_key,
            timeout=self.config.get('AI_TIMEOUT', 120),
        )
        logger.info("Anthropic Claude client initialized")

    def _create_message(self, params: Dict[str, Any]):
        try:
            logger.info(f"Calling Claude API: model={params['model']}, max_tokens={params['max_tokens']}")
            response = self.anthropic_client.messages.create(**params)
            logger.info(f"Claude API call successful: stop_reason={response.stop_reason}")
            return response

        except anthropic.APITimeoutError as e:
            logger.error(f"Claude API timeout: {e}")
            raise AIServiceTimeout(f"Claude API timed out: {e}")
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            raise AIServiceError(f"Claude API error: {e}")

    def call_claude(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system: Optional[str] = None
    ):
        """
        Call Claude API with retry logic

        Args:
            messages: List of message dictionaries
            model: Model name (defaults to config)
            max_tokens: Maximum tokens (defaults to config)
            temperature: Temperature setting (defaults to config)
            system: System prompt

        Returns:
            Anthropic Message response

        Raises:
            AIServiceUnavailable: If Claude is not configured
            AIServiceTimeout: If every attempt timed out
            AIServiceError: On API errors
        """
        if not self.anthropic_client:
            raise AIServiceUnavailable("Anthropic Claude is not configured")

        model_config = self.config['AI_MODELS']['claude']
        params = {
            'model': model or model_config['model'],
            'max_tokens': max_tokens or model_config['max_tokens'],
            'temperature': model_config['temperature'] if temperature is None else temperature,
            'messages': messages,
        }
        if system:
            params['system'] = system

        call = retry_on_failure(
            max_attempts=self.config.get('AI_RETRY_ATTEMPTS', 1),
            delay=self.config.get('AI_RETRY_DELAY', 2),
            retry_on=(AIServiceTimeout,),
        )(self._create_message)
        return call(params)

    def is_available(self, service: str) -> bool:
        """
        Check if a specific AI service is available

        Args:
            service: Service name ('claude')

        Returns:
            True if service is available, False otherwise
        """
        if service == 'claude':
            return self.anthropic_client is not None
        return False
