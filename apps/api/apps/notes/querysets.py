"""
Note query building: catalog filters, text search, related notes, counters.
"""
import operator
from functools import reduce

from django.db import connections, models
from django.db.models import Case, Exists, F, OuterRef, Q, Value, When
from django.utils import timezone

from apps.notes.exceptions import InvalidQuery, NoteNotFound


DEFAULT_ORDERING = '-created_at'

# Wire sort key -> model field
SORT_FIELDS = {
    'createdAt': 'created_at',
    'views': 'views',
    'downloadCount': 'download_count',
    'title': 'title',
}

# Relevance weight per matched field on engines without full-text search
FALLBACK_WEIGHTS = (
    ('title', 4),
    ('description', 2),
    ('content', 1),
)
FALLBACK_TAG_WEIGHT = 2


def ordering_for(sort):
    """
    Translate a wire sort key (``views``, ``-createdAt``...) into an ORM
    ordering. Unknown keys fall back to newest first.
    """
    if not sort:
        return DEFAULT_ORDERING
    descending = sort.startswith('-')
    field = SORT_FIELDS.get(sort.lstrip('-'))
    if field is None:
        return DEFAULT_ORDERING
    return f'-{field}' if descending else field


def page_bounds(page, limit):
    """Slice bounds for a 1-indexed page."""
    offset = (page - 1) * limit
    return offset, offset + limit


class NoteQuerySet(models.QuerySet):

    def approved(self):
        return self.filter(is_approved=True)

    def with_uploader(self):
        """Join the uploader's public profile and prefetch tags and likes."""
        return self.select_related('uploaded_by').prefetch_related('tags', 'likes')

    def filter_catalog(self, subject=None, class_name=None):
        queryset = self
        if subject:
            queryset = queryset.filter(subject=subject)
        if class_name:
            queryset = queryset.filter(class_name=class_name)
        return queryset

    def sorted_by(self, sort):
        ordering = ordering_for(sort)
        if ordering == DEFAULT_ORDERING:
            return self.order_by(ordering)
        return self.order_by(ordering, DEFAULT_ORDERING)

    def _tag_match(self, names):
        through = self.model.tags.through
        return Exists(
            through.objects.filter(note_id=OuterRef('pk'), tag__name__in=names)
        )

    def text_search(self, query):
        """
        Match ``query`` against title, description, content and tag names,
        annotating ``rank`` and ordering by it, best first.

        PostgreSQL uses its own full-text search; other engines fall back
        to a case-insensitive substring match per term.

        Raises:
            InvalidQuery: query is empty or whitespace.
        """
        query = (query or '').strip()
        if not query:
            raise InvalidQuery()

        terms = [term.lower() for term in query.split()]
        if connections[self.db].vendor == 'postgresql':
            return self._postgres_search(query, terms)
        return self._substring_search(terms)

    def _postgres_search(self, query, terms):
        from django.contrib.postgres.search import SearchQuery, SearchRank, SearchVector

        vector = (
            SearchVector('title', weight='A')
            + SearchVector('description', weight='B')
            + SearchVector('content', weight='C')
        )
        search_query = SearchQuery(query, search_type='websearch')
        return (
            self.annotate(
                document=vector,
                tag_hit=self._tag_match(terms),
            )
            .filter(Q(document=search_query) | Q(tag_hit=True))
            .annotate(
                rank=SearchRank(vector, search_query) + Case(
                    When(tag_hit=True, then=Value(0.5)),
                    default=Value(0.0),
                    output_field=models.FloatField(),
                )
            )
            .order_by('-rank', DEFAULT_ORDERING)
        )

    def _substring_search(self, terms):
        queryset = self
        match = Q()
        scores = []
        for index, term in enumerate(terms):
            tag_alias = f'tag_hit_{index}'
            queryset = queryset.annotate(**{tag_alias: self._tag_match([term])})
            term_match = Q(**{tag_alias: True})
            for field, weight in FALLBACK_WEIGHTS:
                lookup = {f'{field}__icontains': term}
                term_match |= Q(**lookup)
                scores.append(Case(When(then=Value(weight), **lookup), default=Value(0)))
            scores.append(Case(When(then=Value(FALLBACK_TAG_WEIGHT), **{tag_alias: True}), default=Value(0)))
            match |= term_match

        rank = reduce(operator.add, scores)
        return (
            queryset.filter(match)
            .annotate(rank=models.ExpressionWrapper(rank, output_field=models.IntegerField()))
            .order_by('-rank', DEFAULT_ORDERING)
        )

    def related_to(self, note, limit):
        """
        Other approved notes sharing the subject, the class or a tag with
        ``note``, newest first.
        """
        queryset = self.approved().exclude(pk=note.pk)
        shared = Q(subject=note.subject) | Q(class_name=note.class_name)
        tag_ids = list(note.tags.values_list('pk', flat=True))
        if tag_ids:
            through = self.model.tags.through
            queryset = queryset.annotate(shares_tag=Exists(
                through.objects.filter(note_id=OuterRef('pk'), tag_id__in=tag_ids)
            ))
            shared |= Q(shares_tag=True)
        return queryset.filter(shared).order_by(DEFAULT_ORDERING)[:limit]

    def _bump(self, pk, field):
        updated = self.filter(pk=pk).update(**{
            field: F(field) + 1,
            'updated_at': timezone.now(),
        })
        if not updated:
            raise NoteNotFound()

    def bump_views(self, pk):
        """Atomically add one view. Raises NoteNotFound if no such note."""
        self._bump(pk, 'views')

    def bump_downloads(self, pk):
        """Atomically add one download. Raises NoteNotFound if no such note."""
        self._bump(pk, 'download_count')
