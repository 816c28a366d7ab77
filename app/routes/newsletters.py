# app/routes/newsletters.py
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from typing import List, Optional
import logging
from app.auth.dependencies import require_admin
from app.auth.models import AdminIdentity
from app.database.connection import DatabaseConnection, get_database
from app.models.newsletter import NewsletterCreate, NewsletterResponse, NewsletterUpdate
from app.models.subscriber import MessageResponse
from app.newsletter.exceptions import ImageUploadError, NewsletterNotFoundError
from app.services.dispatch_service import DispatchService
from app.services.newsletter_service import NewsletterService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/newsletters", tags=["newsletters"])

def get_newsletter_service(db: DatabaseConnection = Depends(get_database)) -> NewsletterService:
    return NewsletterService(db)

def get_dispatch_service(db: DatabaseConnection = Depends(get_database)) -> DispatchService:
    return DispatchService(db)

@router.get("", response_model=List[NewsletterResponse])
async def list_newsletters(
    limit: Optional[int] = Query(None, ge=1, le=100, description="Only the most recent N issues"),
    service: NewsletterService = Depends(get_newsletter_service)
):
    """Public feed, most recent first"""
    try:
        newsletters = await service.list(limit=limit)
        return [NewsletterResponse.model_validate(newsletter) for newsletter in newsletters]
    except Exception as e:
        logger.error(f"Failed to load newsletters: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server Error"
        )

@router.post("", response_model=NewsletterResponse, status_code=status.HTTP_201_CREATED)
async def create_newsletter(
    body: NewsletterCreate,
    background_tasks: BackgroundTasks,
    admin: AdminIdentity = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service),
    dispatcher: DispatchService = Depends(get_dispatch_service)
):
    """Publish a newsletter and email it to active subscribers in the background"""
    try:
        newsletter = await service.create(body)
    except Exception as e:
        logger.error(f"Failed to create newsletter: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server Error"
        )

    # Delivery runs after the response is sent; its outcome never affects it
    background_tasks.add_task(dispatcher.dispatch, newsletter)
    logger.info(f"Newsletter {newsletter['id']} published by {admin.email}, dispatch scheduled")

    return NewsletterResponse.model_validate(newsletter)

@router.get("/{newsletter_id}", response_model=NewsletterResponse)
async def get_newsletter(
    newsletter_id: str,
    service: NewsletterService = Depends(get_newsletter_service)
):
    try:
        return NewsletterResponse.model_validate(await service.get(newsletter_id))
    except NewsletterNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except Exception as e:
        logger.error(f"Failed to load newsletter {newsletter_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server Error"
        )

@router.put("/{newsletter_id}", response_model=NewsletterResponse)
async def update_newsletter(
    newsletter_id: str,
    body: NewsletterUpdate,
    admin: AdminIdentity = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service)
):
    """Update only the fields present in the request body"""
    try:
        newsletter = await service.update(newsletter_id, body)
    except NewsletterNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ImageUploadError as e:
        logger.error(f"Image upload failed for newsletter {newsletter_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image upload failed"
        )
    except Exception as e:
        logger.error(f"Failed to update newsletter {newsletter_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server Error"
        )

    logger.info(f"Newsletter {newsletter_id} updated by {admin.email}")
    return NewsletterResponse.model_validate(newsletter)

@router.delete("/{newsletter_id}", response_model=MessageResponse)
async def delete_newsletter(
    newsletter_id: str,
    admin: AdminIdentity = Depends(require_admin),
    service: NewsletterService = Depends(get_newsletter_service)
):
    try:
        await service.delete(newsletter_id)
    except NewsletterNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except Exception as e:
        logger.error(f"Failed to delete newsletter {newsletter_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server Error"
        )

    logger.info(f"Newsletter {newsletter_id} deleted by {admin.email}")
    return MessageResponse(message="Deleted")
