from django.db.models import Q
from rest_framework import filters, permissions, viewsets

from .models import Exam
from .serializers import ExamDetailSerializer, ExamListSerializer


class ExamViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Exams the caller may take. Staff see every exam; teachers only published
    ones that are public or assign them.
    """
    permission_classes = [permissions.IsAuthenticated]

    # Enable search on code and title
    filter_backends = [filters.SearchFilter]
    search_fields = ['code', 'title']

    def get_queryset(self):
        queryset = Exam.objects.all().order_by('-created_at')
        user = self.request.user
        if user.is_staff:
            return queryset
        return queryset.filter(
            Q(access_mode=Exam.AccessMode.PUBLIC) | Q(assignments__user=user),
            status=Exam.Status.PUBLISHED,
        ).distinct()

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ExamDetailSerializer
        return ExamListSerializer
