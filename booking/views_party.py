# booking/views_party.py
#
# Purpose:
# - Staff-managed content of the packages and party booking pages:
#   package options sold through the cart, party photo albums and the
#   party pricing text.
#
# Endpoints (mounted at /api/):
# - /booking-packages/        list (customers: active rows only), CRUD for booking staff
# - /party-gallery/?category= albums, newest first (default category: birthday)
# - /party-pricing/           GET current text (defaults if never edited), PUT/PATCH upsert
#
# Permissions:
# - Reads are public; writes need the "booking" staff role.
#
import logging

from rest_framework import status, viewsets
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from staff.models import StaffRole
from staff.permissions import StaffRoleOrReadOnly
from staff.roles import has_role
from .models import BookingPackage, PartyGalleryImage, PartyGalleryItem, PartyPricingContent
from .serializers import (
    BookingPackageSerializer,
    PartyGalleryItemSerializer,
    PartyGalleryUploadSerializer,
    PartyPricingSerializer,
)

logger = logging.getLogger(__name__)


# -------------------- Package options --------------------
class BookingPackageViewSet(viewsets.ModelViewSet):
    """
    Package options. Deactivating a row (PATCH is_active=false) hides it
    from customers and the cart; when no row is active the fixed catalog
    is offered instead.
    """
    serializer_class = BookingPackageSerializer
    permission_classes = [StaffRoleOrReadOnly]
    staff_role = StaffRole.BOOKING

    def get_queryset(self):
        qs = BookingPackage.objects.all()
        if has_role(self.request.user, StaffRole.BOOKING):
            return qs
        return qs.filter(is_active=True)

    def perform_create(self, serializer):
        package = serializer.save()
        logger.info("Package option %s created by user %s", package.pk, self.request.user.pk)

    def perform_update(self, serializer):
        package = serializer.save()
        logger.info("Package option %s updated by user %s (active=%s)", package.pk, self.request.user.pk, package.is_active)

    def perform_destroy(self, instance):
        logger.info("Package option %s deleted by user %s", instance.pk, self.request.user.pk)
        instance.delete()


# -------------------- Party gallery --------------------
class PartyGalleryViewSet(viewsets.ModelViewSet):
    serializer_class = PartyGalleryItemSerializer
    permission_classes = [StaffRoleOrReadOnly]
    staff_role = StaffRole.BOOKING
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        qs = PartyGalleryItem.objects.prefetch_related("images").order_by("-created_at", "-id")
        if self.action == "list":
            category = self.request.query_params.get("category") or "birthday"
            qs = qs.filter(category=category)
        return qs

    @staticmethod
    def _add_images(item, uploads):
        start = item.images.count()
        for position, upload in enumerate(uploads, start=start):
            PartyGalleryImage.objects.create(item=item, image=upload, position=position)

    def create(self, request, *args, **kwargs):
        payload = PartyGalleryUploadSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        item = PartyGalleryItem.objects.create(category=data["category"], caption=data["caption"].strip())
        self._add_images(item, data["images"])
        logger.info("Party album %s (%s, %s images) added by user %s",
                    item.pk, item.category, len(data["images"]), request.user.pk)
        return Response(PartyGalleryItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        item = self.get_object()
        payload = PartyGalleryUploadSerializer(item, data=request.data, partial=True)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        changed = [field for field in ("category", "caption") if field in data]
        for field in changed:
            setattr(item, field, data[field].strip())
        if changed:
            item.save(update_fields=changed)
        self._add_images(item, data.get("images") or [])
        return Response(PartyGalleryItemSerializer(PartyGalleryItem.objects.get(pk=item.pk)).data)

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        for picture in item.images.all():
            picture.image.delete(save=False)
        item.delete()
        logger.info("Party album %s deleted by user %s", kwargs.get("pk"), request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


# -------------------- Party pricing --------------------
class PartyPricingView(APIView):
    permission_classes = [StaffRoleOrReadOnly]
    staff_role = StaffRole.BOOKING

    def get(self, request):
        return Response(PartyPricingContent.current())

    def put(self, request):
        return self._save(request, partial=False)

    def patch(self, request):
        return self._save(request, partial=True)

    def _save(self, request, partial):
        payload = PartyPricingSerializer(data=request.data, partial=partial)
        payload.is_valid(raise_exception=True)
        row, _ = PartyPricingContent.objects.get_or_create(
            key=PartyPricingContent.DEFAULT_KEY,
            defaults=PartyPricingContent.DEFAULTS,
        )
        for field, value in payload.validated_data.items():
            setattr(row, field, value.strip())
        row.save()
        logger.info("Party pricing updated by user %s", request.user.pk)
        return Response(PartyPricingContent.current())
