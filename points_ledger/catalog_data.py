"""Static bank and redemption-option reference data."""

from decimal import Decimal

from points_ledger.models.catalog import Bank, OptionTag, RedemptionOption
from points_ledger.models.enums import TagType


def _bank(bank_id: str, name: str, rates: dict[str, str]) -> Bank:
    return Bank(
        bank_id=bank_id,
        name=name,
        logo=f"/assets/banks/{bank_id}.png",
        conversion_rates=tuple((card_type, Decimal(rate)) for card_type, rate in rates.items()),
    )


BANKS: tuple[Bank, ...] = (
    _bank("hdfc", "HDFC Bank", {
        "Regalia": "0.25",
        "Millennia": "0.20",
        "Diners Club": "0.33",
        "RuPay Platinum": "0.22",
        "RuPay Select": "0.30",
    }),
    _bank("icici", "ICICI Bank", {
        "Amazon Pay": "0.30",
        "Coral": "0.25",
        "Platinum": "0.20",
        "RuPay Business": "0.28",
        "RuPay Premium": "0.32",
    }),
    _bank("sbi", "State Bank of India", {
        "SimplySave": "0.20",
        "SimplyClick": "0.25",
        "Elite": "0.30",
        "RuPay Classic": "0.18",
        "RuPay Gold": "0.26",
    }),
    _bank("axis", "Axis Bank", {
        "Neo": "0.20",
        "Privilege": "0.25",
        "Reserve": "0.35",
        "RuPay Platinum": "0.22",
        "RuPay Signature": "0.30",
    }),
    _bank("pnb", "Punjab National Bank", {
        "Pride": "0.18",
        "Global": "0.22",
        "RuPay Standard": "0.15",
        "RuPay Premium": "0.25",
    }),
    _bank("bob", "Bank of Baroda", {
        "Easy": "0.15",
        "Platinum": "0.22",
        "Premier": "0.28",
        "RuPay Select": "0.30",
    }),
    _bank("cbi", "Central Bank of India", {
        "Surya": "0.18",
        "Aditya": "0.22",
        "RuPay Kisan": "0.16",
    }),
    _bank("kotak", "Kotak Mahindra Bank", {
        "Urbane": "0.20",
        "Royale": "0.25",
        "League": "0.32",
        "RuPay Premium": "0.28",
    }),
    _bank("idbi", "IDBI Bank", {
        "Imperium": "0.22",
        "Euphoria": "0.26",
        "RuPay Platinum": "0.24",
    }),
    _bank("yes", "Yes Bank", {
        "Prosperity": "0.24",
        "Prime": "0.28",
        "RuPay Business": "0.26",
    }),
)


# (id, name, description, rate, min points, category, icon, tag)
_OPTIONS = [
    ("cb1", "Statement Credit", "Apply points directly to your card statement",
     "0.25", 1000, "Cashback", "statement-credit", ("Best Value", TagType.BEST)),
    ("fl1", "Flight Booking", "Use points to book domestic flights",
     "0.30", 5000, "Travel", "flight", ("Expiring Points", TagType.EXPIRING)),
    ("az1", "Amazon Gift Card", "Convert points to Amazon shopping credits",
     "0.20", 0, "Shopping", "amazon", ("Popular", TagType.POPULAR)),
    ("ht1", "Hotel Booking", "Redeem points for hotel stays",
     "0.28", 3000, "Travel", "hotel", ("Limited Time", TagType.LIMITED)),
    ("gp1", "Google Play Credit", "Get credits for apps and games",
     "0.22", 500, "Shopping", "google-play", None),
    ("fp1", "Fuel Points", "Redeem points at participating fuel stations",
     "0.25", 1000, "Lifestyle", "fuel", None),
    ("nf1", "Netflix Subscription", "Apply points toward your Netflix subscription",
     "0.20", 1500, "Entertainment", "netflix", None),
    ("ch1", "Charity Donation", "Contribute to charitable causes",
     "0.30", 1000, "Lifestyle", "charity", ("Give Back", TagType.BEST)),
    ("fl2", "Flipkart Gift Card", "Redeem points for Flipkart shopping",
     "0.22", 1000, "Shopping", "flipkart", None),
    ("sw1", "Swiggy Food Credits", "Order food delivery with your points",
     "0.24", 800, "Lifestyle", "swiggy", ("Popular", TagType.POPULAR)),
    ("zo1", "Zomato Pro Membership", "Get Zomato Pro benefits with your points",
     "0.25", 2000, "Lifestyle", "zomato", None),
    ("mk1", "MakeMyTrip Discount", "Get discounts on travel bookings",
     "0.28", 3000, "Travel", "makemytrip", None),
    ("tc1", "Tata CLiQ Voucher", "Shop on Tata CLiQ with your points",
     "0.20", 1200, "Shopping", "tatacliq", None),
    ("ub1", "Uber Ride Credits", "Use points for Uber rides across India",
     "0.26", 1000, "Travel", "uber", None),
    ("pm1", "PhonePe Wallet", "Transfer points to PhonePe wallet",
     "0.25", 500, "Payments", "phonepe", None),
    ("pp1", "Paytm Wallet", "Transfer points to Paytm wallet",
     "0.25", 500, "Payments", "paytm", None),
]

REDEMPTION_OPTIONS: tuple[RedemptionOption, ...] = tuple(
    RedemptionOption(
        option_id=option_id,
        name=name,
        description=description,
        conversion_rate=Decimal(rate),
        min_points=min_points,
        category=category,
        icon=f"/assets/icons/{icon}.svg",
        tag=OptionTag(*tag) if tag else None,
    )
    for option_id, name, description, rate, min_points, category, icon, tag in _OPTIONS
)
