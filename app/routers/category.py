from fastapi import APIRouter
from typing import List
from app.schemas.dashboard_schema import Category

router = APIRouter(prefix='/categories')

# Languages shown on the browse page, in display order.
# icon names refer to the frontend's react-icons set.
LANGUAGE_CATEGORIES = [
    Category(title="English", path="english", icon="FaLanguage"),
    Category(title="Spanish", path="spanish", icon="GiTalk"),
    Category(title="French", path="french", icon="SiGoogletranslate"),
    Category(title="Arabic", path="arabic", icon="GiEgyptianProfile"),
    Category(title="Hindi", path="hindi", icon="GiIndiaGate"),
    Category(title="Chinese", path="chinese", icon="TbLanguageHiragana"),
    Category(title="German", path="german", icon="FaGlobe"),
    Category(title="Japanese", path="japanese", icon="TbWorld"),
    Category(title="Russian", path="russian", icon="MdOutlineLanguage"),
    Category(title="Bengali", path="bengali", icon="MdTranslate"),
    Category(title="Italian", path="italian", icon="FaLanguage"),
    Category(title="Korean", path="korean", icon="TbLanguageHiragana"),
]

@router.get('', response_model=List[Category])
def get_categories():
    return LANGUAGE_CATEGORIES
