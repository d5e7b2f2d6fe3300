"""DeFactuur API client.

This module provides the DeFactuurClient class for interacting with the
DeFactuur invoicing API. It includes:
- HTTP client with api_key authentication
- Bracket-notation parameter encoding for query strings and file uploads
- Response classification into the DeFactuurError family
- Typed methods for clients, invoices, payments and products
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from defactuur.core.config import Settings, settings as default_settings
from defactuur.core.errors import (
    ApiError,
    AuthenticationFailed,
    DeFactuurConnectionError,
    InvalidArgument,
    InvalidResponse,
    UnsupportedMethod,
    ValidationError,
)
from defactuur.models import Client, Invoice, Mail, Payment, Product
from defactuur.services.transcoding import (
    FILE_SENTINEL,
    are_we_sending_a_file,
    build_query,
    decode_response,
    flatten,
    form_value,
    remove_index_from_array_parameters,
)
from defactuur.version import __version__

logger = logging.getLogger(__name__)

Identifier = Union[int, str]


class DeFactuurClient:
    """Client for interacting with the DeFactuur API.

    Provides methods for:
    - Retrieving an API token from account credentials
    - Managing clients, invoices, payments and products
    - Exporting invoices as PDF and uploading CODA files

    Calls are synchronous and never retried; failures surface as
    DeFactuurError subclasses.

    Example:
        ```python
        with DeFactuurClient(api_token="your-api-token") as api:
            for invoice in api.list_invoices(["unpaid"]):
                print(invoice.iid, invoice.total)
        ```
    """

    SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")
    QUERY_METHODS = ("GET", "DELETE")

    ALLOWED_INVOICE_FILTERS = (
        "sent",
        "unpaid",
        "paid",
        "reminder_sent",
        "partially_paid",
        "unset",
        "juridicial_proceedings",
        "late",
    )

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        api_token: Optional[str] = None,
        *,
        api_url: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize DeFactuurClient.

        Args:
            http_client: Optional httpx.Client to send requests with. If None,
                one is created and closed again by ``close()``.
            api_token: API token; defaults to ``settings.api_token``.
            api_url: API base URL; defaults to ``settings.api_url``.
            api_version: API version path segment; defaults to ``settings.api_version``.
            timeout: Request timeout in seconds; defaults to ``settings.timeout``.
            user_agent: Your user agent, appended to ours. It should look
                like ``<app-name>/<app-version>``.
            settings: Settings to read defaults from.
        """
        settings = settings or default_settings

        self.api_token = api_token if api_token is not None else settings.api_token
        self.api_url = (api_url or settings.api_url).rstrip("/")
        self.api_version = (api_version or settings.api_version).strip("/")
        self.timeout = timeout if timeout is not None else settings.timeout
        self.user_agent = user_agent if user_agent is not None else settings.user_agent

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.Client()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and not self.http_client.is_closed:
            self.http_client.close()

    def __enter__(self) -> "DeFactuurClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def full_user_agent(self) -> str:
        """User agent sent with every request.

        It looks like ``Python DeFactuur/<version> <your-user-agent>``.
        """
        return f"Python DeFactuur/{__version__} {self.user_agent}".rstrip()

    # =========================================================================
    # HTTP Request Methods
    # =========================================================================

    def _build_url(self, path: str) -> str:
        return f"{self.api_url}/{self.api_version}/{path.lstrip('/')}"

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request through the transport.

        Raises:
            DeFactuurConnectionError: If the transport fails or times out
        """
        try:
            return self.http_client.request(
                method,
                url,
                headers={"User-Agent": self.full_user_agent},
                timeout=self.timeout,
                **kwargs,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Request to DeFactuur timed out: {e}")
            raise DeFactuurConnectionError(f"Request to DeFactuur timed out: {e}") from e
        except httpx.TransportError as e:
            logger.warning(f"Cannot connect to DeFactuur at {self.api_url}: {e}")
            raise DeFactuurConnectionError(
                f"Cannot connect to DeFactuur at {self.api_url}: {e}"
            ) from e

    def _multipart(self, flat: Dict[str, Any]) -> Dict[str, Any]:
        """Split flattened parameters into form fields and file parts."""
        data: Dict[str, str] = {}
        files: Dict[str, Tuple[str, bytes]] = {}

        for key, value in flat.items():
            if isinstance(value, str) and value.startswith(FILE_SENTINEL):
                file_path = Path(value[len(FILE_SENTINEL):])
                try:
                    files[key] = (file_path.name, file_path.read_bytes())
                except OSError as e:
                    raise InvalidArgument(f"Cannot read file {file_path}: {e}") from e
            else:
                data[key] = form_value(value)

        return {"data": data, "files": files}

    def _raise_for_error(self, response: httpx.Response, method: str, path: str) -> None:
        """Classify an error response.

        Raises:
            ValidationError: For 422 responses or bodies with an ``errors`` mapping
            ApiError: For any other status >= 400
        """
        status = response.status_code

        if status == 422:
            logger.warning(f"Validation error for {method} {path}")
            raise ValidationError(
                f"Validation error - Unprocessable entity. ({status})", status
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.warning(f"Undecodable error response ({status}) for {method} {path}")
            raise ApiError(f"Invalid response ({status}): {e}", status) from e

        if isinstance(body, Mapping) and isinstance(body.get("errors"), Mapping):
            lines = []
            for field, messages in body["errors"].items():
                if isinstance(messages, (list, tuple)):
                    messages = ", ".join(str(message) for message in messages)
                lines.append(f"{field}: {messages}")
            message = "\n".join(lines)
            logger.warning(f"Validation error ({status}) for {method} {path}: {message}")
            raise ValidationError(message, status)

        if isinstance(body, Mapping) and "message" in body:
            message = str(body["message"])
        else:
            message = f"Invalid response ({status})"

        logger.warning(f"API error ({status}) for {method} {path}: {message}")
        raise ApiError(message, status)

    def do_call(
        self,
        path: str,
        parameters: Optional[Dict[str, Any]] = None,
        method: str = "GET",
        return_headers: bool = False,
    ) -> Any:
        """Make a call to the API.

        Args:
            path: Path relative to the versioned API URL, e.g. ``clients.json``
            parameters: Optional nested parameters
            method: HTTP method (GET, POST, PUT, DELETE)
            return_headers: Return the response headers, with the status
                code under ``http_code``, instead of the body

        Returns:
            Decoded JSON (None for an empty body), raw bytes for ``.pdf``
            paths, or a header dict when ``return_headers`` is set

        Raises:
            UnsupportedMethod: For any other method, before any request
            ValidationError: For 422 responses or validation error bodies
            ApiError: For other error responses
            InvalidResponse: If the body is not valid JSON
            DeFactuurConnectionError: If the transport fails
        """
        method = method.upper()
        if method not in self.SUPPORTED_METHODS:
            raise UnsupportedMethod(f"Unsupported method ({method})")

        if not self.api_token:
            raise InvalidArgument("An API token is required, see get_api_token()")

        parameters = dict(parameters or {})
        parameters["api_key"] = self.api_token

        url = self._build_url(path)
        request_kwargs: Dict[str, Any] = {}

        if method in self.QUERY_METHODS:
            url = f"{url}?{remove_index_from_array_parameters(build_query(parameters))}"
        else:
            flat = flatten(parameters)
            if are_we_sending_a_file(flat):
                request_kwargs.update(self._multipart(flat))
            else:
                request_kwargs["json"] = parameters

        logger.debug(f"{method} {path}")
        response = self._send(method, url, **request_kwargs)

        if response.status_code >= 400:
            self._raise_for_error(response, method, path)

        if return_headers:
            headers: Dict[str, Any] = dict(response.headers)
            headers["http_code"] = response.status_code
            return headers

        if ".pdf" in path.lower():
            # PDF contents are returned untouched
            return response.content

        if not response.content.strip():
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponse("Invalid JSON-response") from e

        return decode_response(data)

    @staticmethod
    def _require_key(data: Any, key: str) -> Any:
        if not isinstance(data, Mapping) or key not in data:
            raise InvalidResponse(f"Invalid JSON-response, missing {key!r}")
        return data[key]

    # =========================================================================
    # Account Methods
    # =========================================================================

    def get_api_token(self, username: str, password: str) -> str:
        """Get an API token for an account.

        Args:
            username: Account username
            password: Account password

        Raises:
            AuthenticationFailed: If the credentials are refused
            InvalidResponse: If the response carries no token
        """
        response = self._send(
            "GET",
            self._build_url("account/api_token.json"),
            auth=(username, password),
        )

        if response.status_code != 200:
            logger.warning(f"Authentication failed ({response.status_code})")
            raise AuthenticationFailed("Couldn't authenticate you", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponse("Invalid JSON-response") from e

        return self._require_key(data, "api_token")

    # =========================================================================
    # Client Methods
    # =========================================================================

    def list_clients(self) -> List[Client]:
        """Get all the clients for the authenticating user."""
        return Client.from_raw_list(self.do_call("clients.json"))

    def get_client(self, client_id: Identifier) -> Optional[Client]:
        """Get a single client, or None if the API returns nothing."""
        raw_data = self.do_call(f"clients/{client_id}.json")
        if not raw_data:
            return None
        return Client.from_raw_data(raw_data)

    def get_clients_by_email(self, email: str) -> List[Client]:
        """Get all clients linked to an email address."""
        return Client.from_raw_list(self.do_call("clients.json", {"email": email}))

    def create_client(self, client: Client) -> Client:
        """Create a new client."""
        parameters = {"client": client.to_payload(for_api=True)}
        return Client.from_raw_data(self.do_call("clients.json", parameters, "POST"))

    def update_client(self, client_id: Identifier, client: Client) -> bool:
        """Update an existing client. True when the API answers 204."""
        parameters = {"client": client.to_payload(for_api=True)}
        headers = self.do_call(f"clients/{client_id}.json", parameters, "PUT", True)
        return headers["http_code"] == 204

    def is_european(self, country_code: str) -> bool:
        """Check if a country is part of the EU."""
        raw_data = self.do_call("clients/is_european.json", {"country_code": country_code})
        return bool(self._require_key(raw_data, "european"))

    def delete_client(self, client_id: Identifier) -> bool:
        """Delete a client. True when the API answers 204."""
        headers = self.do_call(f"clients/{client_id}.json", None, "DELETE", True)
        return headers["http_code"] == 204

    def disable_client(self, client_id: Identifier, replaced_by_id: Identifier) -> bool:
        """Disable a client in favour of another one. True when the API answers 201."""
        headers = self.do_call(
            f"clients/{client_id}/disable.json",
            {"replaced_by_id": replaced_by_id},
            "POST",
            True,
        )
        return headers["http_code"] == 201

    def list_client_invoices(self, client_id: Identifier) -> List[Invoice]:
        """Get the invoices of a client."""
        return Invoice.from_raw_list(self.do_call(f"clients/{client_id}/invoices.json"))

    # =========================================================================
    # Invoice Methods
    # =========================================================================

    def list_invoices(self, filters: Optional[List[str]] = None) -> List[Invoice]:
        """Get all invoices, optionally narrowed down by filters.

        Args:
            filters: Any of ALLOWED_INVOICE_FILTERS

        Raises:
            InvalidArgument: For an unknown filter, before any request
        """
        parameters = None

        if filters:
            invalid = [f for f in filters if f not in self.ALLOWED_INVOICE_FILTERS]
            if invalid:
                raise InvalidArgument(f"Invalid filter: {', '.join(map(str, invalid))}")
            parameters = {"filters": list(filters)}

        return Invoice.from_raw_list(self.do_call("invoices.json", parameters))

    def get_invoice(self, invoice_id: Identifier) -> Optional[Invoice]:
        """Get a single invoice by id."""
        raw_data = self.do_call(f"invoices/{invoice_id}.json")
        if not raw_data:
            return None
        return Invoice.from_raw_data(raw_data)

    def get_invoice_pdf(self, invoice_id: Identifier) -> Optional[bytes]:
        """Get the raw PDF contents of an invoice."""
        raw_data = self.do_call(f"invoices/{invoice_id}.pdf")
        return raw_data or None

    def get_invoice_by_iid(self, iid: str) -> Optional[Invoice]:
        """Get a single invoice by its invoice number."""
        raw_data = self.do_call(f"invoices/by_iid/{iid}.json")
        if not raw_data:
            return None
        return Invoice.from_raw_data(raw_data)

    def create_invoice(self, invoice: Invoice) -> Invoice:
        """Create a new invoice.

        Raises:
            InvalidArgument: If only one of vat_exception and
                vat_description is set
        """
        if not invoice.has_consistent_vat_exception():
            raise InvalidArgument(
                "Vat exception and vat description are required if one of them is filled"
            )

        parameters = {"invoice": invoice.to_payload(for_api=True)}
        return Invoice.from_raw_data(self.do_call("invoices.json", parameters, "POST"))

    def create_credit_note(self, invoice_id: Identifier, credit_note: Invoice) -> Invoice:
        """Create a credit note on an invoice."""
        parameters = {"credit_note": credit_note.to_payload(for_api=True)}
        raw_data = self.do_call(f"invoices/{invoice_id}/credit_notes.json", parameters, "POST")
        return Invoice.from_raw_data(raw_data)

    def update_invoice(self, invoice_id: Identifier, invoice: Invoice) -> bool:
        """Update an existing invoice. True when the API answers 204."""
        parameters = {"invoice": invoice.to_payload(for_api=True)}
        headers = self.do_call(f"invoices/{invoice_id}.json", parameters, "PUT", True)
        return headers["http_code"] == 204

    def delete_invoice(self, invoice_id: Identifier) -> bool:
        """Delete an invoice. True when the API answers 204."""
        headers = self.do_call(f"invoices/{invoice_id}.json", None, "DELETE", True)
        return headers["http_code"] == 204

    def send_invoice_by_mail(
        self,
        invoice_id: Identifier,
        to: Optional[str] = None,
        cc: Optional[str] = None,
        bcc: Optional[str] = None,
        subject: Optional[str] = None,
        text: Optional[str] = None,
    ) -> Optional[Mail]:
        """Send an invoice by mail. Only the given fields are sent."""
        mail = {
            "to": to,
            "cc": cc,
            "bcc": bcc,
            "subject": subject,
            "text": text,
        }
        parameters = {"mail": {key: value for key, value in mail.items() if value is not None}}
        raw_data = self.do_call(f"invoices/{invoice_id}/mails.json", parameters, "POST")
        if not raw_data:
            return None
        return Mail.from_raw_data(raw_data)

    def mark_invoice_as_sent_by_mail(self, invoice_id: Identifier, email: str) -> None:
        """Mark an invoice as sent by mail without DeFactuur sending it."""
        self.do_call(f"invoices/{invoice_id}/sent", {"by": "mail", "to": email}, "POST")

    def add_payment(self, invoice_id: Identifier, payment: Payment) -> Payment:
        """Add a payment to an invoice."""
        parameters = {"payment": payment.to_payload(for_api=True)}
        raw_data = self.do_call(f"invoices/{invoice_id}/payments.json", parameters, "POST")
        return Payment.from_raw_data(raw_data)

    def send_reminder(self, invoice_id: Identifier) -> Any:
        """Send a reminder for an invoice."""
        return self.do_call(f"invoices/{invoice_id}/reminders", {}, "POST")

    def is_vat_required(self, country_code: str, is_company: bool) -> bool:
        """Check if VAT is required for a client in a country."""
        raw_data = self.do_call(
            "invoices/vat_required.json",
            {"country_code": country_code, "company": is_company},
        )
        return bool(self._require_key(raw_data, "vat_required"))

    def is_valid_vat(self, vat_number: str) -> bool:
        """Check if a VAT number is valid."""
        raw_data = self.do_call("vat/verify.json", {"vat": vat_number})
        return bool(self._require_key(raw_data, "valid"))

    # =========================================================================
    # Payment Methods
    # =========================================================================

    def upload_coda_file(self, file_path: Union[str, Path]) -> Any:
        """Upload a CODA bank statement and let DeFactuur process it."""
        parameters = {
            "file": f"{FILE_SENTINEL}{file_path}",
            "file_type": "coda",
        }
        return self.do_call("payments/process_file.json", parameters, "POST")

    # =========================================================================
    # Product Methods
    # =========================================================================

    def list_products(self) -> List[Product]:
        return Product.from_raw_list(self.do_call("products.json"))

    def get_product(self, product_id: Identifier) -> Optional[Product]:
        raw_data = self.do_call(f"products/{product_id}.json")
        if not raw_data:
            return None
        return Product.from_raw_data(raw_data)

    def create_product(self, product: Product) -> Product:
        parameters = {"product": product.to_payload(for_api=True)}
        return Product.from_raw_data(self.do_call("products.json", parameters, "POST"))
