from fastapi import APIRouter, Depends

from chatline.schemas.message import MessagePublic, SendMessageRequest
from chatline.schemas.user import UserPublic
from chatline.services.conversation_service import ConversationService
from chatline.services.delivery_service import DeliveryDispatcher
from chatline.utils.dependencies import get_conversation_service, get_current_user, get_delivery_dispatcher


router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/users")
async def list_sidebar(current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    users, unseen = await service.sidebar(current_user["_id"])
    return {
        "success": True,
        "users": [UserPublic.from_document(u) for u in users],
        "unseen_messages": unseen,
    }


@router.put("/mark/{message_id}")
async def mark_message_seen(message_id: str, current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    await service.mark_one_seen(message_id)
    return {"success": True}


@router.post("/send/{receiver_id}")
async def send_message(
    receiver_id: str,
    body: SendMessageRequest,
    current_user: dict = Depends(get_current_user),
    dispatcher: DeliveryDispatcher = Depends(get_delivery_dispatcher),
):
    message = await dispatcher.send(current_user["_id"], receiver_id, text=body.text, image=body.image)
    return {"success": True, "new_message": MessagePublic.from_document(message)}


# registered last so "/users" is not captured as a peer id
@router.get("/{peer_id}")
async def get_conversation(peer_id: str, current_user: dict = Depends(get_current_user), service: ConversationService = Depends(get_conversation_service)):
    messages = await service.open_conversation(current_user["_id"], peer_id)
    return {"success": True, "messages": [MessagePublic.from_document(m) for m in messages]}
