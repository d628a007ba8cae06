"""
TESES Canonical Rubric (土地銀行中小企業簡易ESG評分機制)

Rubric version 2.0: three categories with caps
- E (環境保護與氣候行動): 35 points
- S (社會責任與人力資本): 35 points
- G (公司治理與誠信經營): 30 points

The transformation/transparency (T) category of the 1.x generation is retired.
Answers written for older generations are never scored with the old math; they
are translated into 2.0 answers by LEGACY_TRANSLATIONS and scored here.

Each question has:
- id: Question id, also used as the improvement tag (E1 ... G7)
- category: "E", "S" or "G"
- title: Display title
- keys: Canonical answer keys read by the question, with the enum values each
  key accepts
- ladder: Ordered (pattern, points) rules. A pattern maps answer keys to the
  values that satisfy it; every key in the pattern must match. First match
  wins, no match scores 0.
- max_points: Points of the best ladder rung

Sub-question maxima add up to more than the cap in E (43) and G (41); the cap
is applied to the category total, never to individual questions.
"""

RUBRIC_VERSION = "2.0"

CATEGORIES = ("E", "S", "G")

CATEGORY_CAPS = {"E": 35, "S": 35, "G": 30}

CATEGORY_LABELS = {
    "E": "環境保護與氣候行動",
    "S": "社會責任與人力資本",
    "G": "公司治理與誠信經營",
}

YES_NO = ("yes", "no")


RUBRIC_QUESTIONS = [
    # =========================================================================
    # E: ENVIRONMENT
    # =========================================================================
    {
        "id": "E1",
        "category": "E",
        "title": "碳管理意識與盤查",
        "keys": {
            "e1_carbonManagement": ("completed-scope1-2", "platform-tool", "committed-next-year", "no"),
        },
        "ladder": [
            ({"e1_carbonManagement": ("completed-scope1-2",)}, 12),
            ({"e1_carbonManagement": ("platform-tool",)}, 6),
            ({"e1_carbonManagement": ("committed-next-year",)}, 3),
        ],
        "max_points": 12,
    },
    {
        "id": "E2",
        "category": "E",
        "title": "能源效率與節約行動",
        "keys": {
            "e2_energyEfficiency": ("updated-equipment-past2y", "led-full-replacement", "basic-measures", "no"),
        },
        "ladder": [
            ({"e2_energyEfficiency": ("updated-equipment-past2y",)}, 10),
            ({"e2_energyEfficiency": ("led-full-replacement",)}, 7),
            ({"e2_energyEfficiency": ("basic-measures",)}, 4),
        ],
        "max_points": 10,
    },
    {
        "id": "E3",
        "category": "E",
        "title": "廢棄物與水資源管理",
        "keys": {
            "e3_waste": YES_NO,
            "e3_water": YES_NO,
        },
        "ladder": [
            ({"e3_waste": ("yes",), "e3_water": ("yes",)}, 6),
            ({"e3_waste": ("yes",)}, 3),
            ({"e3_water": ("yes",)}, 3),
        ],
        "max_points": 6,
    },
    {
        "id": "E4",
        "category": "E",
        "title": "無環境污染裁罰",
        "keys": {"e4_environmentalPenalty": YES_NO},
        "ladder": [({"e4_environmentalPenalty": ("yes",)}, 6)],
        "max_points": 6,
    },
    {
        "id": "E5",
        "category": "E",
        "title": "綠能建置投資",
        "keys": {"e5_renewableEnergy": YES_NO},
        "ladder": [({"e5_renewableEnergy": ("yes",)}, 5)],
        "max_points": 5,
    },
    {
        "id": "E6",
        "category": "E",
        "title": "廢棄物資源循環利用",
        "keys": {"e6_circularEconomy": YES_NO},
        "ladder": [({"e6_circularEconomy": ("yes",)}, 4)],
        "max_points": 4,
    },
    # =========================================================================
    # S: SOCIAL
    # =========================================================================
    {
        "id": "S1",
        "category": "S",
        "title": "員工培訓與職涯發展",
        "keys": {"s1_training": ("yes-15hours", "basic-training", "no")},
        "ladder": [
            ({"s1_training": ("yes-15hours",)}, 10),
            ({"s1_training": ("basic-training",)}, 4),
        ],
        "max_points": 10,
    },
    {
        "id": "S2",
        "category": "S",
        "title": "員工福利與友善職場",
        "keys": {"s2_welfare": ("exceeds-law", "basic-insurance", "no")},
        "ladder": [
            ({"s2_welfare": ("exceeds-law",)}, 10),
            ({"s2_welfare": ("basic-insurance",)}, 5),
        ],
        "max_points": 10,
    },
    {
        "id": "S3",
        "category": "S",
        "title": "供應鏈管理（初階）",
        "keys": {"s3_supplychain": YES_NO},
        "ladder": [({"s3_supplychain": ("yes",)}, 5)],
        "max_points": 5,
    },
    {
        "id": "S4",
        "category": "S",
        "title": "當地社會參與",
        "keys": {"s4_community": YES_NO},
        "ladder": [({"s4_community": ("yes",)}, 5)],
        "max_points": 5,
    },
    {
        "id": "S5",
        "category": "S",
        "title": "投資ESG綠色金融商品",
        "keys": {"s5_esgInvestment": YES_NO},
        "ladder": [({"s5_esgInvestment": ("yes",)}, 5)],
        "max_points": 5,
    },
    # =========================================================================
    # G: GOVERNANCE
    # =========================================================================
    {
        "id": "G1",
        "category": "G",
        "title": "永續專責組織與承諾",
        "keys": {"g1_sustainability": ("executive-with-team", "dedicated-staff", "no")},
        "ladder": [
            ({"g1_sustainability": ("executive-with-team",)}, 10),
            ({"g1_sustainability": ("dedicated-staff",)}, 5),
        ],
        "max_points": 10,
    },
    {
        "id": "G2",
        "category": "G",
        "title": "法規遵循紀錄",
        "keys": {"g2_compliance": ("no-major-violations", "minor-violations-resolved", "major-violations")},
        "ladder": [
            ({"g2_compliance": ("no-major-violations",)}, 10),
            ({"g2_compliance": ("minor-violations-resolved",)}, 5),
        ],
        "max_points": 10,
    },
    {
        "id": "G3",
        "category": "G",
        "title": "誠信經營與風險管理",
        "keys": {"g3_integrity": YES_NO},
        "ladder": [({"g3_integrity": ("yes",)}, 5)],
        "max_points": 5,
    },
    {
        "id": "G4",
        "category": "G",
        "title": "近三年皆有盈餘",
        "keys": {"g4_profitability": YES_NO},
        "ladder": [({"g4_profitability": ("yes",)}, 4)],
        "max_points": 4,
    },
    {
        "id": "G5",
        "category": "G",
        "title": "定期召開董事會說明財務",
        "keys": {"g5_boardMeeting": YES_NO},
        "ladder": [({"g5_boardMeeting": ("yes",)}, 4)],
        "max_points": 4,
    },
    {
        "id": "G6",
        "category": "G",
        "title": "定期與股東說明營運狀況",
        "keys": {"g6_shareholderCommunication": YES_NO},
        "ladder": [({"g6_shareholderCommunication": ("yes",)}, 4)],
        "max_points": 4,
    },
    {
        "id": "G7",
        "category": "G",
        "title": "編製永續報告書",
        "keys": {"g7_sustainabilityReport": YES_NO},
        "ladder": [({"g7_sustainabilityReport": ("yes",)}, 4)],
        "max_points": 4,
    },
]


# Legacy answer translation: (legacy_key, canonical_key, {legacy_value: canonical_value}).
# Listed newest generation first; for one canonical key the first legacy key
# present in the raw answers wins. Legacy values missing from the map are dropped.
LEGACY_TRANSLATIONS = [
    # Short keys of the yes/no questionnaire (e1 ... g7)
    ("e1", "e1_carbonManagement", {
        "yes": "completed-scope1-2",
        "platform-tool": "platform-tool",
        "committed-next-year": "committed-next-year",
        "no": "no",
    }),
    ("e2", "e2_energyEfficiency", {
        "yes": "updated-equipment-past2y",
        "led-full-replacement": "led-full-replacement",
        "basic-measures": "basic-measures",
        "no": "no",
    }),
    ("e3", "e3_waste", {"yes": "yes", "no": "no"}),
    ("e4", "e4_environmentalPenalty", {"yes": "yes", "no": "no"}),
    ("e5", "e5_renewableEnergy", {"yes": "yes", "no": "no"}),
    ("e6", "e6_circularEconomy", {"yes": "yes", "no": "no"}),
    # 1.x generation field names
    ("s1_employeeSatisfaction", "s1_training", {"yes": "yes-15hours", "no": "no"}),
    ("s1", "s1_training", {
        "yes": "yes-15hours",
        "yes-15hours": "yes-15hours",
        "basic-training": "basic-training",
        "no": "no",
    }),
    ("s2_community", "s2_welfare", {"yes": "exceeds-law", "no": "no"}),
    ("s2", "s2_welfare", {
        "yes": "exceeds-law",
        "exceeds-law": "exceeds-law",
        "basic-insurance": "basic-insurance",
        "no": "no",
    }),
    ("s3_social", "s3_supplychain", {"yes": "yes", "no": "no"}),
    ("s3", "s3_supplychain", {"yes": "yes", "no": "no"}),
    ("s4", "s4_community", {"yes": "yes", "no": "no"}),
    ("s5", "s5_esgInvestment", {"yes": "yes", "no": "no"}),
    ("g1_governanceStructure", "g1_sustainability", {"yes": "dedicated-staff", "no": "no"}),
    ("g1", "g1_sustainability", {
        "yes": "executive-with-team",
        "executive-with-team": "executive-with-team",
        "dedicated-staff": "dedicated-staff",
        "no": "no",
    }),
    ("g2_riskManagement", "g2_compliance", {"yes": "minor-violations-resolved"}),
    ("g2", "g2_compliance", {
        "yes": "no-major-violations",
        "no-major-violations": "no-major-violations",
        "minor-violations-resolved": "minor-violations-resolved",
        "no": "major-violations",
    }),
    ("g3_audit", "g3_integrity", {"yes": "yes", "no": "no"}),
    ("g3", "g3_integrity", {"yes": "yes", "no": "no"}),
    ("g4", "g4_profitability", {"yes": "yes", "no": "no"}),
    ("g5", "g5_boardMeeting", {"yes": "yes", "no": "no"}),
    ("g6", "g6_shareholderCommunication", {"yes": "yes", "no": "no"}),
    ("g7", "g7_sustainabilityReport", {"yes": "yes", "no": "no"}),
]


IMPROVEMENT_SUGGESTIONS = {
    "E1": {
        "title": "碳管理意識與盤查",
        "actions": [
            "使用輔導平台的「簡易碳盤查工具」，5分鐘完成基本計算",
            "下載免費的「中小企業碳盤查指南」，了解範疇一、二的定義",
            "聯絡我行永續金融顧問，預約免費諮詢服務",
        ],
    },
    "E2": {
        "title": "能源效率與節約行動",
        "actions": [
            "申請政府補助：「中小企業節能補助計畫」最高補助50%",
            "下載「能源效率改善標準作業流程」範本",
            "聯絡合作廠商進行免費能耗診斷",
        ],
    },
    "E3": {
        "title": "廢棄物與水資源管理",
        "actions": [
            "建立廢棄物分類管理制度，參考「廢棄物減量推動指南」",
            "評估導入雨水回收或廢水再利用的可行性",
            "定期進行廢棄物稽核，記錄減量成果",
        ],
    },
    "E4": {
        "title": "無環境污染裁罰",
        "actions": [
            "定期自主檢查廢氣、廢水及噪音排放是否符合環保法規",
            "建立環保法規異動追蹤機制，指定專人負責",
            "若曾受裁罰，完整記錄改善措施並保留證明文件",
        ],
    },
    "E5": {
        "title": "綠能建置投資",
        "actions": [
            "評估屋頂型太陽光電設置可行性，洽詢售電或自發自用方案",
            "了解「綠色融資」產品，降低綠能設備投資成本",
            "考慮採購再生能源憑證，降低範疇二排放",
        ],
    },
    "E6": {
        "title": "廢棄物資源循環利用",
        "actions": [
            "盤點製程廢料，尋找可再利用或交由再生業者處理的項目",
            "與上下游廠商合作建立包材回收機制",
            "參考「循環經濟推動方案」申請相關輔導資源",
        ],
    },
    "S1": {
        "title": "員工培訓與職涯發展",
        "actions": [
            "制定年度人才培訓計畫，目標：每名員工至少15小時",
            "利用「輔導平台」的免費培訓課程資源庫",
            "參與政府補助的專業人才培訓課程",
        ],
    },
    "S2": {
        "title": "員工福利與友善職場",
        "actions": [
            "檢視現有福利政策，對標業界最佳實踐",
            "考慮提供優於法規的福利：彈性工時、育嬰假延長等",
            "建立員工健康檢查制度，每年至少一次",
        ],
    },
    "S3": {
        "title": "供應鏈管理（初階）",
        "actions": [
            "下載「供應商人權與永續承諾書」範本",
            "與主要供應商簽署合作協議，納入ESG條款",
            "定期進行供應商評估，鼓勵改善",
        ],
    },
    "S4": {
        "title": "當地社會參與",
        "actions": [
            "制定年度社區回饋計畫，如志工服務或在地採購",
            "參與當地商業公會或社區活動",
            "與NGO合作，支持弱勢族群或環保項目",
        ],
    },
    "S5": {
        "title": "投資ESG綠色金融商品",
        "actions": [
            "了解本行永續主題存款與綠色債券商品",
            "將部分閒置資金配置於ESG主題基金",
            "於年度財務規劃中設定永續投資比例",
        ],
    },
    "G1": {
        "title": "永續專責組織與承諾",
        "actions": [
            "指派高階主管（或董事）為ESG負責人",
            "成立跨部門的永續委員會，明確訂定職責",
            "定期召開會議，追蹤ESG目標進度",
        ],
    },
    "G2": {
        "title": "法規遵循紀錄",
        "actions": [
            "定期自行檢查是否符合環保、勞工等相關法規",
            "建立合規監測制度，及時排除隱患",
            "若有過去違規，請完整記錄改善過程，提交改善證明",
        ],
    },
    "G3": {
        "title": "誠信經營與風險管理",
        "actions": [
            "將誠信經營政策納入公司規章或員工守則",
            "建立舉報機制，保護檢舉者隱私",
            "定期舉辦誠信經營教育訓練",
        ],
    },
    "G4": {
        "title": "近三年皆有盈餘",
        "actions": [
            "檢視成本結構與產品毛利，訂定獲利改善目標",
            "利用本行財務健診服務，評估營運資金規劃",
            "建立月度財務報表檢討機制",
        ],
    },
    "G5": {
        "title": "定期召開董事會說明財務",
        "actions": [
            "訂定年度董事會開會時程，至少每季一次",
            "於董事會議程中固定納入財務與永續議題",
            "完整保存董事會議事錄",
        ],
    },
    "G6": {
        "title": "定期與股東說明營運狀況",
        "actions": [
            "每年至少召開一次股東說明會",
            "提供股東簡明營運報告，包含ESG執行成果",
            "建立股東意見回饋管道",
        ],
    },
    "G7": {
        "title": "編製永續報告書",
        "actions": [
            "使用輔導平台的「模組化範本」，從簡易版永續報告開始",
            "參考GRI準則選擇重大主題進行揭露",
            "每年更新報告內容，追蹤目標達成情形",
        ],
    },
}


def get_question_by_id(question_id):
    for q in RUBRIC_QUESTIONS:
        if q["id"] == question_id:
            return q
    return None


def canonical_keys():
    """All canonical answer keys with their accepted enum values."""
    keys = {}
    for q in RUBRIC_QUESTIONS:
        keys.update(q["keys"])
    return keys


def get_improvement_suggestions(question_ids):
    """Return {question_id: {title, actions}} for the known ids in question_ids."""
    result = {}
    for qid in question_ids or []:
        if qid in IMPROVEMENT_SUGGESTIONS:
            result[qid] = IMPROVEMENT_SUGGESTIONS[qid]
    return result
