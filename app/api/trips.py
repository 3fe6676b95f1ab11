"""여행 API 엔드포인트."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.trip import (
    DestinationCreateRequest,
    DestinationResponse,
    TripCreateRequest,
    TripDayCreateRequest,
    TripDayResponse,
    TripDetailResponse,
    TripListParams,
    TripListResponse,
    TripResponse,
    TripStatus,
)
from app.services import day_service, trip_query_service, trip_service

router = APIRouter(prefix="/trips", tags=["trips"])

ERROR_RESPONSES = {
    400: {"description": "입력 검증 실패 (`{error, message, details?}`)"},
    401: {"description": "인증 실패"},
    404: {"description": "여행이 없거나 멤버가 아님"},
    503: {"description": "저장소 연결 실패"},
}


@router.get("", response_model=TripListResponse, responses={401: ERROR_RESPONSES[401]})
def list_trips(
    page: str | None = Query(default=None, description="1 이상, 기본 1"),
    limit: str | None = Query(default=None, description="1~100, 기본 20"),
    trip_status: TripStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> TripListResponse:
    """호출자가 멤버인 여행을 최신 생성순으로 반환합니다."""
    params = TripListParams(page=page, limit=limit, status=trip_status)
    return trip_query_service.list_trips(db, user.id, params)


@router.post(
    "",
    response_model=TripResponse,
    status_code=status.HTTP_201_CREATED,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401)},
)
def create_trip(
    request: TripCreateRequest | None = None,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> TripResponse:
    """여행을 만들고 호출자를 OWNER, 나머지 멤버를 EDITOR로 등록합니다."""
    return trip_service.create_trip(db, user.id, request or TripCreateRequest())


@router.get("/{trip_id}", response_model=TripDetailResponse, responses={code: ERROR_RESPONSES[code] for code in (401, 404)})
def get_trip(
    trip_id: str,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> TripDetailResponse:
    """멤버, 여행지, 일자별 일정을 포함한 여행 상세를 반환합니다."""
    return trip_query_service.get_trip(db, user.id, trip_id)


@router.post(
    "/{trip_id}/days",
    response_model=TripDayResponse,
    status_code=status.HTTP_201_CREATED,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 404)},
)
def create_trip_day(
    trip_id: str,
    request: TripDayCreateRequest | None = None,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> TripDayResponse:
    """여행 기간 안의 날짜에 일자와 일정 항목을 추가합니다."""
    return day_service.create_day(db, user.id, trip_id, request or TripDayCreateRequest())


@router.post(
    "/{trip_id}/destinations",
    response_model=DestinationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 404)},
)
def create_destination(
    trip_id: str,
    request: DestinationCreateRequest | None = None,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> DestinationResponse:
    """여행에 여행지를 추가합니다."""
    return trip_service.add_destination(db, user.id, trip_id, request or DestinationCreateRequest())
