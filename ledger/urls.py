from django.urls import path

from .views import (
    AccountView,
    BillQuoteView,
    BillReceiptView,
    CreateListingView,
    EarnCreditsView,
    HistoryView,
    IsOwnListingView,
    LifetimeImpactView,
    ListingsView,
    LogEnergyView,
    MyListingsView,
    PayBillView,
    PurchaseListingView,
    RedeemCreditsView,
    SelectRoleView,
    TodayEnergyView,
    UpdateProfileView,
)

urlpatterns = [
    path("rpc/log_energy/", LogEnergyView.as_view(), name="log-energy"),
    path("rpc/earn_credits/", EarnCreditsView.as_view(), name="earn-credits"),
    path("rpc/create_listing/", CreateListingView.as_view(), name="create-listing"),
    path("rpc/purchase_listing/", PurchaseListingView.as_view(), name="purchase-listing"),
    path("rpc/pay_bill/", PayBillView.as_view(), name="pay-bill"),
    path("rpc/redeem_credits/", RedeemCreditsView.as_view(), name="redeem-credits"),
    path("rpc/select_role/", SelectRoleView.as_view(), name="select-role"),
    path("rpc/update_profile/", UpdateProfileView.as_view(), name="update-profile"),
    path("rpc/is_own_listing/<uuid:listing_id>/", IsOwnListingView.as_view(), name="is-own-listing"),
    path("account/", AccountView.as_view(), name="account"),
    path("energy/today/", TodayEnergyView.as_view(), name="energy-today"),
    path("listings/", ListingsView.as_view(), name="listings"),
    path("listings/mine/", MyListingsView.as_view(), name="my-listings"),
    path("history/", HistoryView.as_view(), name="history"),
    path("impact/", LifetimeImpactView.as_view(), name="lifetime-impact"),
    path("bills/quote/", BillQuoteView.as_view(), name="bill-quote"),
    path("bills/<uuid:receipt_id>/", BillReceiptView.as_view(), name="bill-receipt"),
]
