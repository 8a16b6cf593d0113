"""
TalkBank BaaS API client.

Every request to the API is signed with HMAC-SHA256 using the partner's
signing key; see talkbank.signing for the canonical string format.
"""

import warnings
from typing import Any, Dict, List, Mapping, Optional

import requests

from .constants import DEFAULT_BASE_URL, DEFAULT_CONFIG
from .exceptions import APIError, ConfigurationError, HTTPError
from .request import (
    DispatchTarget,
    SignedRequest,
    build_request,
    filter_data,
    parse_location,
)


def _deprecated(old: str, new: str):
    warnings.warn(
        f"{old}() is deprecated, use {new}() instead",
        DeprecationWarning,
        stacklevel=3
    )


class Client:
    """
    Client for the TalkBank banking-as-a-service API.

    Credentials and the base URL are fixed at construction and only read
    afterwards, so building and signing requests is safe from any thread.
    Dispatch goes through one requests.Session; pass a separate session
    per thread when sending concurrently.
    """

    def __init__(self, partner_id: str, signing_key: str, base_url: Optional[str] = None,
                 session: Optional[requests.Session] = None, **config):
        """
        Initialize the client.

        Args:
            partner_id: Public partner identifier
            signing_key: Secret HMAC signing key
            base_url: API base URL, defaults to the test environment
            session: requests session to dispatch with
            **config: Configuration options (timeout)

        Raises:
            ConfigurationError: If credentials, base URL or options are invalid
        """
        self.partner_id = partner_id
        self.signing_key = signing_key
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip('/')
        self.location = parse_location(self.base_url)

        self.config = {**DEFAULT_CONFIG, **config}
        self._validate_config()

        self.session = session if session is not None else requests.Session()

    def _validate_config(self):
        """Validate client configuration."""
        if not self.partner_id:
            raise ConfigurationError("partner_id cannot be empty")

        if not self.signing_key:
            raise ConfigurationError("signing_key cannot be empty")

        if self.location is None:
            raise ConfigurationError(f"invalid base_url: {self.base_url!r}")

        timeout = self.config['timeout']
        if timeout is not None and timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    def build_request(self, path: str, method: str = 'GET',
                      data: Optional[Mapping[str, Any]] = None,
                      query: Optional[Mapping[str, Any]] = None,
                      target: DispatchTarget = DispatchTarget.STANDARD) -> SignedRequest:
        """Build a signed request without sending it."""
        return build_request(
            self.location,
            self.partner_id,
            self.signing_key,
            path,
            method=method,
            body=data,
            query=query,
            target=target,
        )

    def send(self, request: SignedRequest) -> requests.Response:
        """
        Dispatch a signed request.

        Raises:
            HTTPError: If the transport fails
            APIError: If the API answers with a non-2xx status
        """
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers.as_dict(),
                data=request.body.encode('utf-8') if request.body is not None else None,
                timeout=self.config['timeout']
            )
        except requests.RequestException as e:
            raise HTTPError(f"HTTP request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise APIError(response.status_code, response.text, response)
        return response

    def create_request(self, path: str, method: str = 'GET',
                       data: Optional[Mapping[str, Any]] = None,
                       query: Optional[Mapping[str, Any]] = None,
                       target: DispatchTarget = DispatchTarget.STANDARD) -> requests.Response:
        """
        Build, sign and send a request.

        Args:
            path: API path relative to the base URL
            method: HTTP method
            data: JSON body for POST/PUT
            query: Query parameters
            target: DispatchTarget.HOST_REWRITTEN sends to scheme://host + path

        Returns:
            requests.Response object
        """
        return self.send(self.build_request(path, method, data, query, target))

    def _unsigned(self, path: str, method: str = 'POST',
                  data: Optional[Mapping[str, Any]] = None) -> requests.Response:
        return self.create_request(path, method, data, target=DispatchTarget.HOST_REWRITTEN)

    # Account

    def account_balance(self) -> requests.Response:
        """GET /balance"""
        return self.create_request('/balance')

    def get_account_balance(self) -> requests.Response:
        _deprecated('get_account_balance', 'account_balance')
        return self.account_balance()

    def account_transactions(self) -> requests.Response:
        """GET /transactions"""
        return self.create_request('/transactions')

    def get_account_history(self, date_from: Optional[str] = None, date_to: Optional[str] = None,
                            bank: Optional[str] = None, limit: Optional[int] = None,
                            page: Optional[int] = None) -> requests.Response:
        """Account transactions filtered by date, bank and page (GET /transactions)."""
        query = filter_data({
            'bank': bank,
            'limit': limit,
            'page': page,
            'dateFrom': date_from,
            'dateTo': date_to,
        })
        return self.create_request('/transactions', query=query)

    def account_cards_transactions(self, from_date: str, to_date: str,
                                   page: int = 1, limit: int = 1000) -> requests.Response:
        """
        Transactions of all partner's cards.

        GET /cards-transactions
        """
        query = filter_data({
            'fromDate': from_date,
            'toDate': to_date,
            'page': page,
            'limit': limit,
        })
        return self.create_request('/cards-transactions', query=query)

    # Cards

    def card_transactions(self, client_id: str, barcode: str, date_from: Optional[str] = None,
                          date_to: Optional[str] = None, limit: Optional[int] = None,
                          page: Optional[int] = None) -> requests.Response:
        """
        Card history.

        GET /clients/{client_id}/cards/{barcode}/transactions

        Args:
            client_id: Client identifier
            barcode: Card barcode
            date_from: Datetime with timezone
            date_to: Datetime with timezone
            limit: Page size
            page: Page number
        """
        query = filter_data({
            'dateFrom': date_from,
            'dateTo': date_to,
            'limit': limit,
            'page': page,
        })
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/transactions', query=query)

    def get_card_history(self, client_id: str, ean: str, date_from: Optional[str] = None,
                         date_to: Optional[str] = None, limit: Optional[int] = None,
                         page: Optional[int] = None) -> requests.Response:
        _deprecated('get_card_history', 'card_transactions')
        return self.card_transactions(client_id, ean, date_from, date_to, limit, page)

    def card_list(self, client_id: str) -> requests.Response:
        """GET /clients/{client_id}/cards"""
        return self.create_request(f'/clients/{client_id}/cards')

    def get_clients_cards(self, client_id: str) -> requests.Response:
        _deprecated('get_clients_cards', 'card_list')
        return self.card_list(client_id)

    def card_details(self, client_id: str, barcode: str) -> requests.Response:
        """GET /clients/{client_id}/cards/{barcode}"""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}')

    def get_card_info(self, client_id: str, ean: str) -> requests.Response:
        _deprecated('get_card_info', 'card_details')
        return self.card_details(client_id, ean)

    def card_order_status(self, client_id: str, barcode: str, order_id: str) -> requests.Response:
        """Direct transaction status, alias for payment_status."""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/{order_id}')

    def card_balance(self, client_id: str, barcode: str) -> requests.Response:
        """GET /clients/{client_id}/cards/{barcode}/balance"""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/balance')

    def get_card_balance(self, client_id: str, ean: str) -> requests.Response:
        _deprecated('get_card_balance', 'card_balance')
        return self.card_balance(client_id, ean)

    def card_lock_status(self, client_id: str, barcode: str) -> requests.Response:
        """GET /clients/{client_id}/cards/{barcode}/lock"""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/lock')

    def card_lock(self, client_id: str, barcode: str, reason: Optional[str] = None) -> requests.Response:
        """Block the card (POST /clients/{client_id}/cards/{barcode}/lock)."""
        data = filter_data({'reason': reason})
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/lock', 'POST', data)

    def block_card(self, client_id: str, ean: str, reason: Optional[str] = None) -> requests.Response:
        _deprecated('block_card', 'card_lock')
        return self.card_lock(client_id, ean, reason)

    def card_unlock(self, client_id: str, barcode: str) -> requests.Response:
        """Unblock the card (DELETE /clients/{client_id}/cards/{barcode}/lock)."""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/lock', 'DELETE')

    def unblock_card(self, client_id: str, ean: str) -> requests.Response:
        _deprecated('unblock_card', 'card_unlock')
        return self.card_unlock(client_id, ean)

    def card_activate_virtual(self, client_id: str) -> requests.Response:
        """Create a virtual card (POST /clients/{client_id}/virtual-cards)."""
        return self.create_request(f'/clients/{client_id}/virtual-cards', 'POST')

    def create_virtual_card(self, client_id: str) -> requests.Response:
        _deprecated('create_virtual_card', 'card_activate_virtual')
        return self.card_activate_virtual(client_id)

    def card_activate(self, client_id: str, barcode: str) -> requests.Response:
        """POST /clients/{client_id}/cards/{barcode}/activate"""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/activate', 'POST')

    def activate_card(self, client_id: str, ean: str) -> requests.Response:
        _deprecated('activate_card', 'card_activate')
        return self.card_activate(client_id, ean)

    def card_activation(self, client_id: str, barcode: str) -> requests.Response:
        """Card activation status."""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/activation')

    def get_activation_status(self, client_id: str, ean: str) -> requests.Response:
        _deprecated('get_activation_status', 'card_activation')
        return self.card_activation(client_id, ean)

    def card_cvv(self, client_id: str, barcode: str) -> requests.Response:
        """Send the CVV to the client's phone."""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/security-code')

    def get_security_code(self, client_id: str, ean: str) -> requests.Response:
        _deprecated('get_security_code', 'card_cvv')
        return self.card_cvv(client_id, ean)

    def card_cardholder_data(self, client_id: str, barcode: str) -> requests.Response:
        """GET /clients/{client_id}/cards/{barcode}/cardholder/data"""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/cardholder/data')

    def card_limits(self, client_id: str, barcode: str) -> requests.Response:
        """GET /clients/{client_id}/cards/{barcode}/limits"""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/limits')

    def card_refill(self, client_id: str, barcode: str, amount: float,
                    order_id: Optional[str] = None) -> requests.Response:
        """
        Refill the card from the account.

        POST /clients/{client_id}/cards/{barcode}/refill
        """
        data = filter_data({
            'amount': amount,
            'order_id': order_id,
        })
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/refill', 'POST', data)

    def refill_card(self, client_id: str, ean: str, amount: float,
                    order_id: Optional[str] = None) -> requests.Response:
        _deprecated('refill_card', 'card_refill')
        return self.card_refill(client_id, ean, amount, order_id)

    def card_withdrawal(self, client_id: str, barcode: str, amount: float,
                        order_id: Optional[str] = None) -> requests.Response:
        """
        Withdraw money from the card to the account.

        POST /clients/{client_id}/cards/{barcode}/withdrawal
        """
        data = filter_data({
            'amount': amount,
            'order_id': order_id,
        })
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/withdrawal', 'POST', data)

    def refill_account(self, client_id: str, ean: str, amount: float,
                       order_id: Optional[str] = None) -> requests.Response:
        _deprecated('refill_account', 'card_withdrawal')
        return self.card_withdrawal(client_id, ean, amount, order_id)

    def set_card_pin(self, client_id: str, barcode: str, pin_code: int) -> requests.Response:
        """Set the card PIN (RFI cards only)."""
        data = filter_data({'pin': pin_code})
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/set/pin', 'POST', data)

    def card_pdf(self, client_id: str, barcode: str) -> requests.Response:
        """Identification PDF for the client/card, supported by a few banks only."""
        return self.create_request(f'/clients/{client_id}/cards/{barcode}/pdf')

    # Card2card

    def create_payment_link(self, client_id: str) -> requests.Response:
        return self.create_request(f'/clients/{client_id}/card2card', 'POST')

    def get_payment_link_status(self, client_id: str, payment_id: str) -> requests.Response:
        return self.create_request(f'/clients/{client_id}/card2card/{payment_id}')

    # Event subscriptions

    def event_subscription_list(self) -> requests.Response:
        """GET /event-subscriptions"""
        return self.create_request('/event-subscriptions')

    def get_subscriptions(self) -> requests.Response:
        _deprecated('get_subscriptions', 'event_subscription_list')
        return self.event_subscription_list()

    def event_subscription_store(self, url: str, events: Optional[List[str]] = None) -> requests.Response:
        """
        Subscribe a callback URL to events.

        POST /event-subscriptions

        Args:
            url: Callback URL
            events: Event names, all events when omitted
        """
        data = filter_data({
            'url': url,
            'events': events,
        })
        return self.create_request('/event-subscriptions', 'POST', data)

    def subscribe_to_event(self, client_id: str, limit: int = 50, skip: int = 500,
                           alpha: str = '') -> requests.Response:
        _deprecated('subscribe_to_event', 'event_subscription_store')
        data = {'client_id': client_id}
        query = {'limit': limit, 'skip': skip, 'alpha': alpha}
        return self.create_request('/event-subscriptions', 'POST', data, query)

    def event_subscription_remove(self, subscription_id: str) -> requests.Response:
        """DELETE /event-subscriptions/{subscription_id}"""
        return self.create_request(f'/event-subscriptions/{subscription_id}', 'DELETE')

    def delete_subscription(self, subscription_id: str) -> requests.Response:
        _deprecated('delete_subscription', 'event_subscription_remove')
        return self.event_subscription_remove(subscription_id)

    # Card deliveries

    def card_delivery_store(self, client_id: str, data: Dict[str, Any]) -> requests.Response:
        """POST /clients/{client_id}/card-deliveries"""
        return self.create_request(f'/clients/{client_id}/card-deliveries', 'POST', data)

    def create_delivery(self, client_id: str, data: Dict[str, Any]) -> requests.Response:
        _deprecated('create_delivery', 'card_delivery_store')
        return self.card_delivery_store(client_id, data)

    def card_delivery_show(self, client_id: str, delivery_id: str) -> requests.Response:
        """GET /clients/{client_id}/card-deliveries/{delivery_id}"""
        return self.create_request(f'/clients/{client_id}/card-deliveries/{delivery_id}')

    def get_delivery_status(self, client_id: str, delivery_id: str) -> requests.Response:
        _deprecated('get_delivery_status', 'card_delivery_show')
        return self.card_delivery_show(client_id, delivery_id)

    # Clients

    def client_store(self, client_id: str, person: Dict[str, Any]) -> requests.Response:
        """Create the client (POST /clients)."""
        return self.create_request('/clients', 'POST', {
            'client_id': client_id,
            'person': person,
        })

    def add_client(self, person: Dict[str, Any]) -> requests.Response:
        """Takes {'client_id': ..., 'person': {...}}."""
        _deprecated('add_client', 'client_store')
        return self.client_store(person['client_id'], person['person'])

    def client_edit(self, client_id: str, person: Dict[str, Any]) -> requests.Response:
        """Update the client (PUT /clients)."""
        return self.create_request('/clients', 'PUT', {
            'client_id': client_id,
            'person': person,
        })

    def client_show(self, client_id: str) -> requests.Response:
        """Client's status."""
        return self.create_request(f'/clients/{client_id}')

    def get_client_status(self, client_id: str) -> requests.Response:
        _deprecated('get_client_status', 'client_show')
        return self.client_show(client_id)

    # Holds

    def hold(self, amount: Optional[int] = None, order_slug: Optional[str] = None,
             card_info: Optional[Dict[str, Any]] = None, card_ref_id: Optional[str] = None,
             redirect_url: Optional[str] = None) -> requests.Response:
        """
        Hold money on a registered or unregistered card.

        POST /hold
        """
        data = filter_data({
            'amount': amount,
            'order_slug': order_slug,
            'card_info': card_info,
            'card_ref_id': card_ref_id,
            'redirect_url': redirect_url,
        })
        return self.create_request('/hold', 'POST', data)

    def hold_with_form(self, client_id: str, redirect_url: str, amount: int,
                       order_slug: Optional[str] = None,
                       card_token: Optional[str] = None) -> requests.Response:
        """Hold money using the payment form (POST /hold/{client_id}/with/form)."""
        data = filter_data({
            'redirect_url': redirect_url,
            'amount': amount,
            'order_slug': order_slug,
            'card_token': card_token,
        })
        return self.create_request(f'/hold/{client_id}/with/form', 'POST', data)

    def hold_confirm(self, order_slug: str, amount: Optional[int] = None) -> requests.Response:
        """Confirm a full or partial hold."""
        data = filter_data({'amount': amount})
        return self.create_request(f'/hold/confirm/{order_slug}', 'POST', data)

    def hold_reverse(self, order_slug: str, amount: Optional[int] = None) -> requests.Response:
        data = filter_data({'amount': amount})
        return self.create_request(f'/hold/reverse/{order_slug}', 'POST', data)

    # Payments

    def payment_from_unregistered_card(self, client_id: str, amount: int, card_info: Dict[str, Any],
                                       redirect_url: Optional[str] = None,
                                       order_slug: Optional[str] = None) -> requests.Response:
        """
        Charge an unregistered card to the account.

        POST /charge/{client_id}/unregistered/card
        """
        data = filter_data({
            'amount': amount,
            'card_info': card_info,
            'redirect_url': redirect_url,
            'order_slug': order_slug,
        })
        return self.create_request(f'/charge/{client_id}/unregistered/card', 'POST', data)

    def payment_from_unregistered_card_token(self, client_id: str, redirect_url: str,
                                             amount: int) -> requests.Response:
        """Token for a client-side charge."""
        data = filter_data({
            'redirect_url': redirect_url,
            'amount': amount,
        })
        return self.create_request(f'/charge/{client_id}/token', 'POST', data)

    def payment_to_unregistered_card_token(self, client_id: str, amount: int,
                                           order_slug: Optional[str] = None) -> requests.Response:
        """Token for a client-side refill."""
        data = filter_data({
            'amount': amount,
            'order_slug': order_slug,
        })
        return self.create_request(f'/refill/{client_id}/token', 'POST', data)

    def payment_from_unregistered_card_with_form(self, client_id: str, amount: int,
                                                 order_slug: Optional[str] = None,
                                                 redirect_url: Optional[str] = None) -> requests.Response:
        data = filter_data({
            'amount': amount,
            'order_slug': order_slug,
            'redirect_url': redirect_url,
        })
        return self.create_request(f'/charge/{client_id}/unregistered/card/with/form', 'POST', data)

    def payment_from_registered_card(self, client_id: str, amount: int, card_token: str,
                                     order_slug: Optional[str] = None) -> requests.Response:
        """Charge a registered card without 3DS."""
        data = filter_data({
            'amount': amount,
            'card_token': card_token,
            'order_slug': order_slug,
        })
        return self.create_request(f'/payment/from/{client_id}/registered/card', 'POST', data)

    def payment_authorization(self, client_id: str, card_info: Dict[str, Any],
                              redirect_url: Optional[str] = None) -> requests.Response:
        """POST /authorize/card/{client_id}"""
        data = filter_data({
            'card_info': card_info,
            'redirect_url': redirect_url,
        })
        return self.create_request(f'/authorize/card/{client_id}', 'POST', data)

    def payment_authorization_token(self, client_id: str,
                                    redirect_url: Optional[str] = None) -> requests.Response:
        """Tokens for card authorization on the client side."""
        data = filter_data({'redirect_url': redirect_url})
        return self.create_request(f'/authorize/card/{client_id}/token', 'POST', data)

    def payment_authorization_with_form(self, client_id: str, redirect_url: Optional[str] = None,
                                        order_slug: Optional[str] = None) -> requests.Response:
        data = filter_data({
            'redirect_url': redirect_url,
            'order_slug': order_slug,
        })
        return self.create_request(f'/authorize/card/{client_id}/with/form', 'POST', data)

    def payment_to_registered_card(self, client_id: str, card_token: str, amount: int,
                                   order_slug: Optional[str] = None) -> requests.Response:
        data = filter_data({
            'card_token': card_token,
            'amount': amount,
            'order_slug': order_slug,
        })
        return self.create_request(f'/payment/to/{client_id}/registered/card', 'POST', data)

    def payment_to_account(self, amount: int, account: str, bik: str, name: str,
                           inn: Optional[str] = None, description: Optional[str] = None,
                           order_slug: Optional[str] = None) -> requests.Response:
        """
        Transfer money to a bank account.

        POST /account/transfer

        Args:
            amount: Amount to transfer
            account: Recipient account number
            bik: Recipient bank BIK
            name: Recipient name
            inn: Recipient INN
            description: Payment purpose
            order_slug: Partner order identifier
        """
        data = filter_data({
            'amount': amount,
            'account': account,
            'bik': bik,
            'name': name,
            'inn': inn,
            'description': description,
            'order_slug': order_slug,
        })
        return self.create_request('/account/transfer', 'POST', data)

    def payment_to_unregistered_card(self, card_number: str, amount: Optional[int] = None,
                                     order_slug: Optional[str] = None) -> requests.Response:
        """Refill a card by its number."""
        data = filter_data({
            'card_number': card_number,
            'amount': amount,
            'order_slug': order_slug,
        })
        return self.create_request('/refill/unregistered/card', 'POST', data)

    def payment_to_unregistered_card_with_form(self, client_id: str, amount: int,
                                               order_slug: Optional[str] = None,
                                               redirect_url: Optional[str] = None) -> requests.Response:
        data = filter_data({
            'amount': amount,
            'order_slug': order_slug,
            'redirect_url': redirect_url,
        })
        return self.create_request(f'/refill/{client_id}/unregistered/card/with/form', 'POST', data)

    def payment_status(self, order_slug: str) -> requests.Response:
        """Direct payment status (GET /payment/{order_slug})."""
        return self.create_request(f'/payment/{order_slug}')

    def selfemployments_registration_status(self, client_id: str) -> requests.Response:
        return self.create_request(f'/selfemployments/{client_id}')

    # Client-side endpoints, dispatched to scheme://host/client/v1/...

    def unsigned_payment_from_unregistered_card(self, token: str, amount: int,
                                                card_info: Dict[str, Any]) -> requests.Response:
        """Client-side charge (POST /client/v1/charge)."""
        data = filter_data({
            'token': token,
            'amount': amount,
            'card_info': card_info,
        })
        return self._unsigned('/client/v1/charge', data=data)

    def unsigned_payment_to_unregistered_card(self, token: str, card_number: str) -> requests.Response:
        """
        Refill a card on the client side with a temporary token.

        The token comes from payment_to_unregistered_card_token or
        payment_to_unregistered_card_with_form.
        """
        data = filter_data({
            'token': token,
            'card_number': card_number,
        })
        return self._unsigned('/client/v1/refill', data=data)

    def unsigned_payment_authorization(self, token: str, card_info: Dict[str, Any]) -> requests.Response:
        data = filter_data({
            'token': token,
            'card_info': card_info,
        })
        return self._unsigned('/client/v1/authorize', data=data)

    def unsigned_hold(self, token: str, card_info: Dict[str, Any]) -> requests.Response:
        """Hold a card on the client side."""
        data = filter_data({
            'token': token,
            'card_info': card_info,
        })
        return self._unsigned('/client/v1/hold', data=data)

    def unsigned_payment_status_by_hash(self, payment_hash: str) -> requests.Response:
        """GET /client/v1/status/{hash}"""
        return self._unsigned(f'/client/v1/status/{payment_hash}', 'GET')

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
