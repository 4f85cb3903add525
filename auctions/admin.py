"""
Admin configuration for auctions app
"""
from django.contrib import admin
from .models import Auction


@admin.register(Auction)
class AuctionAdmin(admin.ModelAdmin):
    list_display = ['chit_scheme', 'auction_date', 'winning_member', 'amount_received', 'discount_amount', 'status']
    list_filter = ['status', 'auction_date']
    search_fields = ['chit_scheme__name', 'winning_member__name', 'remarks']
    readonly_fields = ['propagated_at', 'created_at', 'updated_at']
