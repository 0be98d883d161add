import logging
import os
from functools import wraps
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(env_file=None):
    """
    Configure root logging from LOG_LEVEL / LOG_FILE.
    The .env file is loaded first so its values win over the defaults.
    """
    load_dotenv(env_file or PROJECT_ROOT / ".env")
    log_file = os.getenv("LOG_FILE", "")
    log_level = os.getenv("LOG_LEVEL", "INFO")

    handlers = [logging.StreamHandler()]
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


# Logger setup
configure_logging()


def get_logger(name):
    """Return a logger instance for the given name."""
    return logging.getLogger(name)


logger = get_logger(__name__)


class PaymentError(Exception):
    """Base error for the checkout flow; anything not more specific is an internal error."""

    log_level = logging.ERROR

    def __init__(
        self,
        message,
        stage="Unknown",
        product_id=None,
        order_id=None,
        original_exception=None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.product_id = product_id
        self.order_id = order_id
        self.original_exception = original_exception
        logger.log(
            self.log_level,
            f"[{type(self).__name__}] Stage: {self.stage}, Product ID: {self.product_id}, "
            f"Order ID: {self.order_id}, Message: {self.message}, Original: {self.original_exception}"
        )


class CatalogError(PaymentError):
    """Catalog definition failed validation at load time."""


class ProductNotFound(PaymentError):
    """Lookup of an id that is not in the catalog."""

    log_level = logging.WARNING


class InvalidProduct(PaymentError):
    """Client asked to buy a product that does not exist."""

    log_level = logging.WARNING


class GatewayFailure(PaymentError):
    """Payment gateway call failed or timed out."""


class DuplicateOrder(PaymentError):
    """An order with the same order_id is already stored."""


def handle_errors(stage):
    """
    Decorator that wraps unexpected exceptions in PaymentError.
    PaymentError subclasses are re-raised untouched so callers can map them.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            product_id = kwargs.get("product_id")
            try:
                return func(*args, **kwargs)
            except PaymentError:
                raise
            except Exception as e:
                error_message = f"Error while running '{func.__name__}': {e}"
                raise PaymentError(
                    error_message,
                    stage=stage,
                    product_id=product_id,
                    original_exception=e,
                ) from e

        return wrapper

    return decorator
