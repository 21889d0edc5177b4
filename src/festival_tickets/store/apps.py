"""Django app configuration for the ticket store app."""

from django.apps import AppConfig


class FestivalTicketsStoreConfig(AppConfig):
    """Configuration for the ticket store app."""

    name = "festival_tickets.store"
    label = "festival_tickets_store"
    verbose_name = "Ticket Store"
