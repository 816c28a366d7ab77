# app/routes/subscribers.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse
from typing import List
import logging
from app.database.connection import DatabaseConnection, get_database
from app.models.subscriber import (
    MessageResponse, SubscribeOutcome, SubscribeRequest, SubscribeResponse,
    SubscriberResponse, SubscriberStats
)
from app.newsletter.exceptions import AlreadySubscribedError, SubscriberNotFoundError
from app.newsletter.service import SubscriberService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/subscribers", tags=["subscribers"])

UNSUBSCRIBED_PAGE = "<h1>Successfully unsubscribed</h1>"
INVALID_LINK_PAGE = "<h1>Invalid unsubscribe link</h1>"
SERVER_ERROR_PAGE = "<h1>Server error</h1>"

def get_subscriber_service(db: DatabaseConnection = Depends(get_database)) -> SubscriberService:
    return SubscriberService(db)

@router.get("", response_model=List[SubscriberResponse])
async def list_subscribers(service: SubscriberService = Depends(get_subscriber_service)):
    """List every subscriber, newest first"""
    try:
        subscribers = await service.list_all()
        return [SubscriberResponse.model_validate(subscriber) for subscriber in subscribers]
    except Exception as e:
        logger.error(f"Failed to load subscribers: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load subscribers"
        )

@router.post("", response_model=SubscribeResponse, status_code=status.HTTP_201_CREATED)
@router.post("/subscribe", response_model=SubscribeResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    body: SubscribeRequest,
    req: Request,
    response: Response,
    service: SubscriberService = Depends(get_subscriber_service)
):
    """Subscribe an email, or reactivate it if it had unsubscribed"""
    try:
        result = await service.subscribe(
            email=body.email,
            name=body.name,
            preferences=body.preferences.model_dump(mode="json") if body.preferences else None,
            ip_address=req.client.host if req.client else None,
            user_agent=req.headers.get("user-agent")
        )
    except AlreadySubscribedError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Already subscribed"
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Newsletter subscription error for {body.email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Subscription failed. Please try again later."
        )

    subscriber = SubscriberResponse.model_validate(result.subscriber)
    if result.outcome == SubscribeOutcome.REACTIVATED:
        response.status_code = status.HTTP_200_OK
        return SubscribeResponse(message="Subscription reactivated", subscriber=subscriber)

    return SubscribeResponse(message="Successfully subscribed", subscriber=subscriber)

@router.get("/stats", response_model=SubscriberStats)
async def get_subscriber_stats(service: SubscriberService = Depends(get_subscriber_service)):
    """Live subscriber counts by status"""
    try:
        return SubscriberStats(**await service.stats())
    except Exception as e:
        logger.error(f"Failed to get subscriber stats: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve statistics"
        )

@router.get("/unsubscribe/{token}", response_class=HTMLResponse)
async def unsubscribe_from_link(
    token: str,
    service: SubscriberService = Depends(get_subscriber_service)
):
    """Target of the link in every newsletter email"""
    try:
        await service.unsubscribe_by_token(token)
    except SubscriberNotFoundError:
        return HTMLResponse(INVALID_LINK_PAGE, status_code=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        logger.error(f"Unsubscribe GET error: {e}")
        return HTMLResponse(SERVER_ERROR_PAGE, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTMLResponse(UNSUBSCRIBED_PAGE)

@router.post("/unsubscribe/{token}", response_model=MessageResponse)
async def unsubscribe(
    token: str,
    service: SubscriberService = Depends(get_subscriber_service)
):
    try:
        await service.unsubscribe_by_token(token)
    except SubscriberNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid unsubscribe link"
        )
    except Exception as e:
        logger.error(f"Unsubscribe POST error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    return MessageResponse(message="Successfully unsubscribed")

@router.delete("/unsubscribe/{token}", response_model=MessageResponse)
async def delete_subscriber(
    token: str,
    service: SubscriberService = Depends(get_subscriber_service)
):
    """Permanently remove the subscriber record"""
    try:
        await service.delete_by_token(token)
    except SubscriberNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid unsubscribe link"
        )
    except Exception as e:
        logger.error(f"Unsubscribe DELETE error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    return MessageResponse(message="You have been unsubscribed and removed from our mailing list.")
