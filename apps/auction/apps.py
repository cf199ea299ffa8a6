from django.apps import AppConfig


class AuctionConfig(AppConfig):
    name = 'apps.auction'
    label = 'auction'
