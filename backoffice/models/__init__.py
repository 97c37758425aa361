"""Database models for the back-office analytics engine"""

from backoffice.models.commerce import (
    Customer,
    Product,
    Order,
    OrderItem
)

from backoffice.models.marketing import (
    Campaign,
    Promotion,
    EmailCampaign,
    SocialMediaPost
)

from backoffice.models.finance import (
    Invoice,
    Expense
)

from backoffice.models.report import Report
