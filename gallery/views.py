# gallery/views.py
#
# Purpose:
# - Community photo feed, uploads (with server-side crop), likes, comments
#   and moderation.
#
# Endpoints (mounted at /api/gallery/):
# - GET    photos/?sort=popular|recent         public feed
# - GET    photos/?mine=1                      own photos, any visibility
# - GET    photos/?visibility=pending          moderation queue (moderators)
# - POST   photos/                             multipart upload
# - DELETE photos/{id}/                        owner or moderator
# - POST   photos/{id}/like/                   toggle like
# - GET/POST photos/{id}/comments/
# - DELETE photos/{id}/comments/{comment_id}/  own comment (moderators: any)
# - POST   photos/{id}/visibility/             moderators; owners private <-> pending
#
import logging
import uuid

from django.core.files.base import ContentFile
from django.db import IntegrityError, transaction
from django.db.models import Exists, OuterRef, F, Q, Value, BooleanField
from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from staff.models import StaffRole
from staff.permissions import IsAuthenticatedOrReadOnly
from staff.roles import has_role
from .models import GalleryItem, PhotoComment, PhotoLike
from .serializers import (
    GalleryItemSerializer,
    PhotoCommentSerializer,
    UploadSerializer,
    VisibilitySerializer,
)
from .services import image_cropper
from .services.image_cropper import CropError

logger = logging.getLogger(__name__)

MODERATOR_ROLES = (StaffRole.GALLERY_MODERATOR, StaffRole.GALLERY)


def is_moderator(user) -> bool:
    return has_role(user, *MODERATOR_ROLES)


class GalleryItemViewSet(viewsets.ModelViewSet):
    serializer_class = GalleryItemSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    http_method_names = ["get", "post", "delete", "head", "options"]

    def get_queryset(self):
        user = self.request.user
        params = self.request.query_params
        qs = GalleryItem.objects.select_related("user")

        if user.is_authenticated:
            qs = qs.annotate(
                user_has_liked=Exists(PhotoLike.objects.filter(photo=OuterRef("pk"), user=user))
            )
        else:
            qs = qs.annotate(user_has_liked=Value(False, output_field=BooleanField()))

        if self.action == "list":
            if params.get("mine") == "1" and user.is_authenticated:
                qs = qs.filter(user=user)
            elif params.get("visibility") and is_moderator(user):
                qs = qs.filter(visibility=params["visibility"])
            else:
                qs = qs.filter(visibility=GalleryItem.VISIBILITY_PUBLIC)
        else:
            # Detail routes: public photos, own photos, or anything for moderators
            if not is_moderator(user):
                visible = Q(visibility=GalleryItem.VISIBILITY_PUBLIC)
                if user.is_authenticated:
                    visible |= Q(user=user)
                qs = qs.filter(visible)

        if params.get("sort") == "popular":
            return qs.order_by("-like_count", "-created_at")
        return qs.order_by("-created_at")

    def create(self, request, *args, **kwargs):
        payload = UploadSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        upload = data["image"]

        try:
            image = image_cropper.open_image(upload)
            if data["has_crop"]:
                state = image_cropper.state_from_client(
                    image.width, image.height,
                    data["frame_w"], data["frame_h"],
                    data["scale"], data.get("tx", 0), data.get("ty", 0),
                )
                feed_bytes, thumb_bytes = image_cropper.export_feed_and_thumb(image, state)
                aspect = image_cropper.nearest_aspect(state.frame_w, state.frame_h)
            else:
                feed_bytes, thumb_bytes = image_cropper.generate_feed_and_thumb(image)
                aspect = "original"
        except CropError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        staff_post = is_moderator(request.user)
        item = GalleryItem(
            user=request.user,
            caption=data.get("caption", ""),
            aspect=aspect,
            visibility=GalleryItem.VISIBILITY_PUBLIC if staff_post else GalleryItem.VISIBILITY_PENDING,
            is_official=staff_post and data.get("official", False),
        )
        base = f"{uuid.uuid4().hex}.jpg"
        feed_name = image_cropper.make_variant_name(base, aspect, "feed")
        item.image.save(feed_name, ContentFile(feed_bytes), save=False)
        item.thumbnail.save(image_cropper.thumb_name_from_feed(feed_name), ContentFile(thumb_bytes), save=False)
        item.width, item.height = item.image.width, item.image.height
        item.save()
        logger.info("Gallery upload %s by user %s (%s)", item.pk, request.user.pk, item.visibility)

        item.user_has_liked = False
        return Response(GalleryItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        if item.user_id != request.user.id and not is_moderator(request.user):
            return Response({"detail": "You can only delete your own photos."}, status=status.HTTP_403_FORBIDDEN)
        item.image.delete(save=False)
        item.thumbnail.delete(save=False)
        item.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def like(self, request, pk=None):
        item = self.get_object()
        with transaction.atomic():
            deleted, _ = PhotoLike.objects.filter(photo=item, user=request.user).delete()
            if deleted:
                GalleryItem.objects.filter(pk=item.pk, like_count__gt=0).update(like_count=F("like_count") - 1)
                liked = False
            else:
                try:
                    with transaction.atomic():
                        PhotoLike.objects.create(photo=item, user=request.user)
                except IntegrityError:
                    # A concurrent request already liked it
                    liked = True
                else:
                    GalleryItem.objects.filter(pk=item.pk).update(like_count=F("like_count") + 1)
                    liked = True
        item.refresh_from_db(fields=["like_count"])
        return Response({"liked": liked, "like_count": item.like_count})

    @action(detail=True, methods=["get", "post"])
    def comments(self, request, pk=None):
        item = self.get_object()
        if request.method == "GET":
            qs = item.comments.select_related("user")
            return Response(PhotoCommentSerializer(qs, many=True).data)

        serializer = PhotoCommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            comment = serializer.save(photo=item, user=request.user)
            GalleryItem.objects.filter(pk=item.pk).update(comment_count=F("comment_count") + 1)
        return Response(PhotoCommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"comments/(?P<comment_id>\d+)")
    def delete_comment(self, request, pk=None, comment_id=None):
        item = self.get_object()
        comment = get_object_or_404(PhotoComment, pk=comment_id, photo=item)
        if comment.user_id != request.user.id and not is_moderator(request.user):
            return Response({"detail": "You can only delete your own comments."}, status=status.HTTP_403_FORBIDDEN)
        with transaction.atomic():
            comment.delete()
            GalleryItem.objects.filter(pk=item.pk, comment_count__gt=0).update(comment_count=F("comment_count") - 1)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def visibility(self, request, pk=None):
        item = self.get_object()
        serializer = VisibilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data["visibility"]

        if not is_moderator(request.user):
            owner_choices = (GalleryItem.VISIBILITY_PRIVATE, GalleryItem.VISIBILITY_PENDING)
            if item.user_id != request.user.id or target not in owner_choices:
                return Response(
                    {"detail": "Only moderators can publish photos."},
                    status=status.HTTP_403_FORBIDDEN,
                )

        item.visibility = target
        item.save(update_fields=["visibility", "updated_at"])
        logger.info("Photo %s visibility -> %s by user %s", item.pk, target, request.user.pk)
        return Response(GalleryItemSerializer(item).data)
