"""Constants used throughout the gridsift package."""

# Supported file formats for reading delimited text
SUPPORTED_FORMATS = {".csv", ".tsv", ".txt"}

# CLI exit codes
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_INVALID_INPUT = 2
EXIT_IO_ERROR = 3

# Separator for lists stored inside a single setting (date formats, literals, null markers)
LIST_DELIMITER = ";"

# ValueFormat defaults
DEFAULT_DATE_FORMAT = "MM/dd/yyyy"
DEFAULT_DATE_SEPARATOR = "/"
DEFAULT_TIME_SEPARATOR = ":"
DEFAULT_DECIMAL_SEPARATOR = "."
DEFAULT_GROUP_SEPARATOR = ""
DEFAULT_NUMBER_FORMAT = "0.#####"
DEFAULT_TRUE_VALUE = "True"
DEFAULT_FALSE_VALUE = "False"
DEFAULT_PART = 2
DEFAULT_PART_SPLITTER = ":"
DEFAULT_PART_TO_END = True
SERIAL_DATE_FORMAT = "SerialDate"

# Guess settings defaults
DEFAULT_CHECKED_RECORDS = 30000
DEFAULT_SAMPLE_VALUES = 200
DEFAULT_MIN_SAMPLES = 5
DEFAULT_TREAT_AS_NULL = "NULL;n/a"
DEFAULT_MAX_SAMPLE_CHARS = 100
DEFAULT_POSSIBLE_MATCH_RATIO = 0.75

# Inference limits
MAX_NON_MATCHING_EXAMPLES = 4
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
DOUBLE_THRESHOLD = 1e28

# Value clusters
DEFAULT_MAX_CLUSTER_VALUES = 40
BLANK_DISPLAY = "(Blank)"

# OLE Automation dates
SERIAL_DATE_MIN = -657435.0
SERIAL_DATE_MAX = 2958466.0
SERIAL_YEARS_BACK = 80
SERIAL_YEARS_AHEAD = 20

CURRENCY_SYMBOLS = (
    "¤",
    "$",
    "₪",
    "£",
    "₹",
    "€",
    "₼",
    "₽",
    "₦",
    "৳",
    "¥",
    "₱",
    "₡",
    "₲",
    "؋",
    "֏",
    "₾",
    "₸",
    "៛",
    "₩",
    "₭",
    "₮",
    "₴",
    "฿",
    "₺",
    "₫",
)

# Candidate separators tried while guessing numbers and dates
NUMBER_GROUP_SEPARATORS = (",", ".", " ", "’", "⹁")
NUMBER_DECIMAL_SEPARATORS = (".", ",", "/")
DATE_SEPARATORS = ("/", "-", ".", " ")

TRUE_VALUES = (
    "True", "1", "-1", "yes", "y", "t", "on", "Wahr", "Sì", "Si", "Ja", "active", "an",
    "Правда", "Да", "Вярно", "Vero", "Veritable", "Vera", "Jah", "igen", "真實", "真实", "真",
    "是啊", "예", "사실", "อย่างแท้จริง", "ใช่", "हाँ", "सच", "نعم", "صحيح", "سچا", "درست است",
    "جی ہاں", "بله", "נכון", "כן", "はい", "Так", "Ναι", "Αλήθεια", "Ya", "Wir", "Waar", "Vrai",
    "Verdadero", "Verdade", "Totta", "Tõsi", "Tiesa", "Tak", "taip", "Sim", "Sí", "Sant",
    "Sanna", "Sandt", "Res", "Prawdziwe", "Pravda", "Patiess", "Oui", "Kyllä", "jā", "Iva",
    "Igaz", "Ie", "Gerçek", "Evet", "Đúng", "da", "Có", "Benar", "áno", "Ano", "Adevărat",
)  # fmt: skip

FALSE_VALUES = (
    "False", "0", "No", "n", "F", "Non", "Nein", "Falsch", "無", "无", "假", "없음", "거짓",
    "ไม่ใช่", "เท็จ", "नहीं", "झूठी", "نہيں", "نه", "نادرست", "لا", "كاذبة", "جھوٹا", "שווא", "לא",
    "いいえ", "Фалшиви", "Ні", "Нет", "Не", "ЛОЖЬ", "Ψευδείς", "Όχι", "Yanlış", "Viltus", "Valse",
    "Vale", "Väärä", "Tidak", "Sai", "Palsu", "nu", "Nr", "nie", "NEPRAVDA", "nem", "Nej",
    "nei", "nē", "Ne", "Não", "na", "off", "le", "Klaidingas", "Không", "inactive", "aus",
    "Hayır", "Hamis", "Foloz", "Ffug", "Faux", "Fałszywe", "Falso", "Falske", "Falska", "Falsk",
    "Fals", "Falošné", "Ei",
)  # fmt: skip

# Date/time patterns tried in addition to the locale patterns
EXTRA_DATE_TIME_FORMATS = (
    "yyyyMMdd",
    "yyyy-MM-dd",
    "yyyy/MM/dd",
    "yyyy-MM-ddTHH:mm:ss",
    "yyyy-MM-ddTHH:mm:ss.FFFFFFF",
    "yyyy-MM-ddTHH:mm:sszzz",
    "yyyy-MM-ddTHH:mm:ss.FFFFFFFzzz",
    "yyyy-MM-dd HH:mm:ss",
    "yyyy-MM-dd HH:mm:ss.FFF",
    "yyyy-MM-dd HH:mm",
    "yyyy/MM/dd HH:mm:ss",
    "MM/dd/yyyy",
    "dd/MM/yyyy",
    "M/d/yyyy",
    "d/M/yyyy",
    "MM/dd/yy",
    "dd/MM/yy",
    "MM/dd/yyyy HH:mm:ss",
    "dd/MM/yyyy HH:mm:ss",
    "MM/dd/yyyy HH:mm",
    "dd/MM/yyyy HH:mm",
    "M/d/yyyy h:mm:ss tt",
    "M/d/yyyy h:mm tt",
    "dd-MMM-yyyy",
    "d-MMM-yyyy",
    "dd MMM yyyy",
    "d MMM yyyy",
    "d MMMM yyyy",
    "MMMM d, yyyy",
    "MMM d, yyyy",
    "dddd, MMMM d, yyyy",
    "HH:mm:ss",
    "HH:mm",
    "h:mm tt",
    "h:mm:ss tt",
)

# Filter operators
OPERATOR_BEGINS = "xxx…"
OPERATOR_CONTAINS = "…xxx…"
OPERATOR_ENDS = "…xxx"
OPERATOR_EQUALS = "="
OPERATOR_NOT_EQUALS = "<>"
OPERATOR_SMALLER = "<"
OPERATOR_SMALLER_EQUAL = "<="
OPERATOR_BIGGER = ">"
OPERATOR_BIGGER_EQUAL = ">="
OPERATOR_LONGER = "longer"
OPERATOR_SHORTER = "shorter"
OPERATOR_IS_NULL = "(Blank)"
OPERATOR_NOT_NULL = "(Not Blank)"
