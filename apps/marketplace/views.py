import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .price_reveal import public_listing_payload, public_listing_list_payload, reveal_payload
from .serializers import (
    PublicListingSerializer,
    OwnerListingSerializer,
    ListingInputSerializer,
    ListingFilterSerializer,
    ProspectSubmitSerializer,
    ProspectSerializer,
    RevealSerializer,
    ShareSerializer,
    MyShareSerializer,
    LoveGiftSummarySerializer,
    SaleConfirmationSerializer,
    ImpressionInputSerializer,
    OkResponseSerializer,
    ErrorResponseSerializer,
)
from .services import (
    create_listing,
    update_listing,
    remove_listing,
    reactivate_listing,
    get_owned_listing,
    get_my_listings,
    get_active_listings,
    get_public_listing,
    record_listing_view,
    record_impression,
    get_or_create_share,
    get_share,
    get_member_shares,
    get_love_gift_summary,
    submit_prospect,
    confirm_sale,
    reject_prospect,
    get_listing_prospects,
    client_ip_from_request,
    hash_ip,
    # Exceptions
    ValidationError,
    NotFound,
    SelfReferralNotAllowed,
    AlreadyConverted,
    InvalidProspectState,
)

logger = logging.getLogger(__name__)

UUID_PATTERN = '[0-9a-fA-F-]{36}'


class ListingPagination(PageNumberPagination):
    """Custom pagination for listings."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ListingViewSet(viewsets.ViewSet):
    """
    Listing endpoints.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Browse active listings (public shape)
    create: Create a listing
    retrieve: Owner view with discounted price
    partial_update: Edit a listing (owner)
    destroy: Soft-remove a listing (owner)
    """

    lookup_value_regex = UUID_PATTERN

    def get_permissions(self):
        """Browsing is anonymous, everything else needs a member."""
        if self.action in ['list', 'public']:
            return [AllowAny()]
        return [IsAuthenticated()]

    @extend_schema(
        parameters=[ListingFilterSerializer],
        responses={200: PublicListingSerializer(many=True)},
        tags=['marketplace'],
    )
    def list(self, request):
        filter_serializer = ListingFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = get_active_listings(
            listing_type=params.get('type'),
            category=params.get('category')
        )

        paginator = ListingPagination()
        page = paginator.paginate_queryset(queryset, request)
        return paginator.get_paginated_response(public_listing_list_payload(page, request))

    @extend_schema(
        request=ListingInputSerializer,
        responses={201: OwnerListingSerializer, 400: ErrorResponseSerializer},
        tags=['marketplace'],
    )
    def create(self, request):
        serializer = ListingInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            listing = create_listing(owner=request.user, **serializer.validated_data)
        except ValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(OwnerListingSerializer(listing).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        responses={200: OwnerListingSerializer, 404: ErrorResponseSerializer},
        tags=['marketplace'],
    )
    def retrieve(self, request, pk=None):
        try:
            listing = get_owned_listing(listing_id=pk, owner=request.user)
        except NotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(OwnerListingSerializer(listing).data)

    @extend_schema(
        request=ListingInputSerializer,
        responses={200: OwnerListingSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
        tags=['marketplace'],
    )
    def partial_update(self, request, pk=None):
        serializer = ListingInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            listing = update_listing(listing_id=pk, owner=request.user, **serializer.validated_data)
        except NotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(OwnerListingSerializer(listing).data)

    @extend_schema(
        responses={204: None, 404: ErrorResponseSerializer},
        tags=['marketplace'],
    )
    def destroy(self, request, pk=None):
        try:
            remove_listing(listing_id=pk, owner=request.user)
        except NotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        request=None,
        responses={200: OwnerListingSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
        tags=['marketplace'],
    )
    @action(detail=True, methods=['post'])
    def reactivate(self, request, pk=None):
        try:
            listing = reactivate_listing(listing_id=pk, owner=request.user)
        except NotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(OwnerListingSerializer(listing).data)

    @extend_schema(
        responses={200: OwnerListingSerializer(many=True)},
        tags=['marketplace'],
    )
    @action(detail=False, methods=['get'])
    def mine(self, request):
        """
        Get the current member's listings in every status.

        GET /api/marketplace/listings/mine/
        """
        queryset = get_my_listings(owner=request.user)

        paginator = ListingPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OwnerListingSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @extend_schema(
        parameters=[
            OpenApiParameter('ref', OpenApiTypes.STR, description='Referral share code from the share link'),
        ],
        responses={200: PublicListingSerializer, 404: ErrorResponseSerializer},
        tags=['marketplace'],
    )
    @action(detail=True, methods=['get'])
    def public(self, request, pk=None):
        """
        Public listing detail. Never includes the discounted price.

        GET /api/marketplace/listings/{id}/public/?ref={share_code}
        """
        try:
            listing = get_public_listing(listing_id=pk)
        except NotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        payload = public_listing_payload(listing, request, ref=request.query_params.get('ref'))

        if not listing.is_owned_by(request.user):
            record_listing_view(
                listing=listing,
                ip_hash=hash_ip(client_ip_from_request(request)),
                share_code=payload['share_code'],
            )

        return Response(payload)

    @extend_schema(
        methods=['GET'],
        responses={200: ShareSerializer},
        description="Current member's share link for the listing (share_code is null when none exists).",
        tags=['marketplace'],
    )
    @extend_schema(
        methods=['POST'],
        request=None,
        responses={200: ShareSerializer, 201: ShareSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
        description="Create the current member's share link, or return the existing one.",
        tags=['marketplace'],
    )
    @action(detail=True, methods=['get', 'post'])
    def share(self, request, pk=None):
        """
        GET  /api/marketplace/listings/{id}/share/
        POST /api/marketplace/listings/{id}/share/
        """
        if request.method == 'GET':
            existing = get_share(listing_id=pk, member=request.user)
            if existing is None:
                return Response({'share_code': None, 'share_url': None})
            return Response(ShareSerializer(existing).data)

        try:
            share, created = get_or_create_share(listing_id=pk, member=request.user)
        except NotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SelfReferralNotAllowed as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        response_status = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return Response(ShareSerializer(share).data, status=response_status)

    @extend_schema(
        responses={200: ProspectSerializer(many=True), 404: ErrorResponseSerializer},
        tags=['marketplace'],
    )
    @action(detail=True, methods=['get'])
    def prospects(self, request, pk=None):
        """
        Prospects for one of the current member's listings.

        GET /api/marketplace/listings/{id}/prospects/
        """
        try:
            prospects = get_listing_prospects(listing_id=pk, owner=request.user)
        except NotFound as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ProspectSerializer(prospects, many=True).data)


@extend_schema(
    request=ProspectSubmitSerializer,
    responses={
        201: RevealSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        500: ErrorResponseSerializer,
    },
    description="Submit name/contact to reveal the discounted price or contact the seller.",
    tags=['marketplace'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def prospect_submit(request):
    """Anonymous prospect submission - thin HTTP handler."""
    serializer = ProspectSubmitSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'error': 'Invalid submission', 'details': serializer.errors},
            status=status.HTTP_400_BAD_REQUEST
        )
    data = serializer.validated_data

    try:
        result = submit_prospect(
            listing_id=data['listing_id'],
            action_type=data['action_type'],
            prospect_name=data['prospect_name'],
            share_code=data.get('share_code'),
            prospect_mobile=data.get('prospect_mobile'),
            prospect_email=data.get('prospect_email'),
            consented=data.get('consented', False),
            ip_address=client_ip_from_request(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
        )
    except ValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except NotFound as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except Exception:
        logger.exception("Prospect submission failed for listing %s", data['listing_id'])
        return Response({'error': 'Failed to submit'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(reveal_payload(result), status=status.HTTP_201_CREATED)


@extend_schema(
    request=None,
    responses={
        200: SaleConfirmationSerializer,
        404: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Confirm a prospect bought the listing and credit the referring member.",
    tags=['marketplace'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def prospect_confirm(request, listing_id, prospect_id):
    try:
        confirmation = confirm_sale(
            listing_id=listing_id,
            prospect_id=prospect_id,
            owner=request.user
        )
    except NotFound as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (AlreadyConverted, InvalidProspectState) as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response(SaleConfirmationSerializer(confirmation).data)


@extend_schema(
    request=None,
    responses={
        200: ProspectSerializer,
        404: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Mark a prospect as not buying.",
    tags=['marketplace'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def prospect_reject(request, listing_id, prospect_id):
    try:
        prospect = reject_prospect(
            listing_id=listing_id,
            prospect_id=prospect_id,
            owner=request.user
        )
    except NotFound as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except AlreadyConverted as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response(ProspectSerializer(prospect).data)


@extend_schema(
    responses={200: MyShareSerializer(many=True)},
    description="Current member's share links with impression, click and prospect counts.",
    tags=['marketplace'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_shares(request):
    shares = get_member_shares(member=request.user)
    return Response(MyShareSerializer(shares, many=True).data)


@extend_schema(
    responses={200: LoveGiftSummarySerializer},
    description="Current member's Love Gift earnings.",
    tags=['marketplace'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def love_gifts(request):
    summary = get_love_gift_summary(member=request.user)
    summary['shares'] = get_member_shares(member=request.user)
    return Response(LoveGiftSummarySerializer(summary).data)


@extend_schema(
    request=ImpressionInputSerializer,
    responses={200: OkResponseSerializer, 400: ErrorResponseSerializer},
    description="Log an impression or CTA click. Storage failures are ignored.",
    tags=['marketplace'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def impression_log(request):
    serializer = ImpressionInputSerializer(data=request.data)
    if not serializer.is_valid():
        if 'event' in serializer.errors:
            return Response({'error': 'Invalid impression event'}, status=status.HTTP_400_BAD_REQUEST)
        logger.warning("Ignoring malformed impression beacon: %s", serializer.errors)
        return Response({'ok': True})

    data = serializer.validated_data
    record_impression(
        listing_id=data['listing_id'],
        share_code=data.get('share_code'),
        event=data['event'],
        ip_hash=hash_ip(client_ip_from_request(request)),
    )
    return Response({'ok': True})
