"""검색 인덱스 설정 — 검색/필터/정렬 속성 선언 → Elasticsearch settings + mappings

IndexSettings는 인덱스가 "무엇을" 지원해야 하는지 선언하고,
to_es_schema()가 이를 ES 스키마({"settings", "mappings"})로 변환한다.

    searchable  → text (standard analyzer) + raw keyword 서브필드
    filterable  → keyword (searchable이면 <field>.raw 사용)
    sortable    → keyword / integer
    typo_tolerance → mappings._meta 에 저장, 검색 시 fuzziness "AUTO:<one>,<two>"
    max_total_hits → index.max_result_window
    ranking_rules  → mappings._meta 에 저장, "<field>:desc" 규칙은 검색 시 sort 절
"""

from dataclasses import dataclass, field

DEFAULT_RANKING_RULES = ["words", "typo", "proximity", "attribute", "sort", "exactness"]

TEXT_FIELD = {
    "type": "text",
    "analyzer": "standard",
    "fields": {"raw": {"type": "keyword"}},
}


@dataclass
class TypoTolerance:
    enabled: bool = True
    one_typo: int = 4   # 이 길이 이상 단어부터 오타 1개 허용
    two_typos: int = 8  # 이 길이 이상 단어부터 오타 2개 허용

    @property
    def fuzziness(self) -> str | int:
        if not self.enabled:
            return 0
        return f"AUTO:{self.one_typo},{self.two_typos}"


@dataclass
class IndexSettings:
    primary_key: str
    searchable: list[str]
    filterable: list[str] = field(default_factory=list)
    sortable: list[str] = field(default_factory=list)
    numeric: list[str] = field(default_factory=list)
    ranking_rules: list[str] = field(default_factory=lambda: list(DEFAULT_RANKING_RULES))
    typo_tolerance: TypoTolerance = field(default_factory=TypoTolerance)
    max_total_hits: int = 1000

    def field_path(self, name: str) -> str:
        """필터/정렬에 쓸 실제 ES 필드 경로"""
        if name in self.searchable and name not in self.numeric:
            return f"{name}.raw"
        return name

    def ranking_sort(self) -> list[dict]:
        """"product_count:desc" 같은 커스텀 규칙 → ES sort 절"""
        sort = []
        for rule in self.ranking_rules:
            if ":" not in rule:
                continue
            name, order = rule.split(":", 1)
            sort.append({self.field_path(name): {"order": order}})
        return sort

    def to_es_schema(self) -> dict:
        properties: dict = {}
        for name in self.searchable:
            properties[name] = dict(TEXT_FIELD)
        for name in [*self.filterable, *self.sortable]:
            if name in properties:
                continue
            properties[name] = {"type": "integer" if name in self.numeric else "keyword"}
        for name in self.numeric:
            properties[name] = {"type": "integer"}

        return {
            "settings": {
                "number_of_shards": 1,
                "number_of_replicas": 0,
                "max_result_window": self.max_total_hits,
            },
            "mappings": {
                "_meta": {
                    "primary_key": self.primary_key,
                    "searchable": self.searchable,
                    "filterable": self.filterable,
                    "sortable": self.sortable,
                    "ranking_rules": self.ranking_rules,
                    "typo_tolerance": {
                        "enabled": self.typo_tolerance.enabled,
                        "one_typo": self.typo_tolerance.one_typo,
                        "two_typos": self.typo_tolerance.two_typos,
                    },
                },
                "properties": properties,
            },
        }


# ── products 인덱스 ──
PRODUCTS_SETTINGS = IndexSettings(
    primary_key="id",
    searchable=["title", "category", "supplier", "country"],
    filterable=["category", "country", "source", "supplier"],
    sortable=["price"],
    typo_tolerance=TypoTolerance(enabled=True, one_typo=4, two_typos=8),
    max_total_hits=100_000,
)

# ── suppliers 인덱스 (상품 키워드 보강) ──
SUPPLIERS_SETTINGS = IndexSettings(
    primary_key="Supplier_ID",
    searchable=[
        "Supplier_Title",
        "Supplier_Description",
        "Supplier_Location",
        "Supplier_Country_Name",
        "Supplier_City_Name",
        "Supplier_Email",
        "Supplier_Whatsapp",
        "Supplier_ID",
        "product_keywords",
    ],
    filterable=["Supplier_Country_Name", "Supplier_Source_ID", "product_count"],
    sortable=["Supplier_Title", "Supplier_Country_Name", "product_count"],
    numeric=["product_count"],
    ranking_rules=[*DEFAULT_RANKING_RULES, "product_count:desc"],
    max_total_hits=100_000,
)
