"""
Marketing Analytics

Campaign activity, promo code usage and email engagement for the period.
"""
from backoffice.schemas.analytics import Domain, DomainSnapshot, MarketingOverview
from backoffice.services.base_aggregator import BaseAggregator
from backoffice.utils.metrics import safe_divide, round_metric
from backoffice.utils.periods import Period

ACTIVE_STATUS = "ACTIVE"


class MarketingAggregator(BaseAggregator):
    domain = Domain.MARKETING

    def _aggregate(self, period: Period) -> DomainSnapshot:
        repo = self.repository

        campaigns = repo.campaigns_created(period.start, period.end)
        promotions = repo.promotions_created(period.start, period.end)
        email_campaigns = repo.email_campaigns_created(period.start, period.end)
        social_posts = repo.social_posts_created(period.start, period.end)

        emails_sent = sum(e.sent_count or 0 for e in email_campaigns)
        email_opens = sum(e.open_count or 0 for e in email_campaigns)
        email_clicks = sum(e.click_count or 0 for e in email_campaigns)

        overview = MarketingOverview(
            total_campaigns=len(campaigns),
            active_campaigns=sum(1 for c in campaigns if c.status == ACTIVE_STATUS),
            total_promo_usage=sum(p.usage_count or 0 for p in promotions),
            email_open_rate=round_metric(safe_divide(email_opens, emails_sent)),
            email_click_rate=round_metric(safe_divide(email_clicks, email_opens)),
        )

        return DomainSnapshot(
            domain=self.domain,
            period=period,
            overview=overview,
            breakdowns={
                "campaigns": campaigns,
                "promotions": promotions,
                "emailCampaigns": email_campaigns,
                "socialMediaPosts": social_posts,
            },
        )
