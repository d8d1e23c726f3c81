import django_filters as df

from .models import Idea
from .permissions import resolve_role
from .review import ROLE_ADMIN
from .review.settings_store import is_blind_review_enabled


class IdeaFilter(df.FilterSet):
    title = df.CharFilter(field_name="title", lookup_expr="icontains")
    status = df.ChoiceFilter(choices=Idea.Status.choices)
    created_at = df.DateFromToRangeFilter()
    terminal_outcome = df.CharFilter(field_name="stage_state__terminal_outcome")
    owner = df.NumberFilter(method="filter_owner")

    class Meta:
        model = Idea
        fields = ["title", "status", "created_at", "owner", "terminal_outcome"]

    def filter_owner(self, queryset, name, value):
        # Ignored for non-admins while blind review is on
        user = getattr(self.request, "user", None)
        if is_blind_review_enabled() and resolve_role(user) != ROLE_ADMIN:
            return queryset
        return queryset.filter(owner_id=value)
