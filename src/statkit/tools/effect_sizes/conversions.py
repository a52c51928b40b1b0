import math
from typing import Optional, Union

from statkit.constants import ES_CONVERSIONS


def es_convert(es: float, from_es: str, to_es: str,
               ex1: Optional[Union[float, str]] = None, ex2: Optional[float] = None) -> float:
    """
    Convert one effect size measure into another.

    Supported pairs and the meaning of ex1 / ex2 are listed in
    statkit.constants.ES_CONVERSIONS, e.g.:
        es_convert(0.5, "cohend", "or", ex1="chinn")
        es_convert(0.3, "cramervgof", "cohenw", ex1=4)        # ex1 = number of categories
        es_convert(0.2, "etasq", "epsilonsq", ex1=60, ex2=3)  # ex1 = n, ex2 = k

    Raises:
        ValueError: If the conversion is not supported or a needed extra value is missing
    """
    key = (from_es, to_es)
    if key not in ES_CONVERSIONS:
        raise ValueError(
            f"Conversion from '{from_es}' to '{to_es}' not supported. "
            f"Available: {[f'{a}->{b}' for a, b in ES_CONVERSIONS]}"
        )

    needs_ex1 = {("cramervgof", "cohenw"), ("epsilonsq", "etasq"), ("epsilonsq", "omegasq"),
                 ("etasq", "epsilonsq"), ("jbme", "cohenw"), ("omegasq", "epsilonsq")}
    needs_ex2 = {("epsilonsq", "etasq"), ("epsilonsq", "omegasq"), ("etasq", "epsilonsq"), ("omegasq", "epsilonsq")}
    if key in needs_ex1 and ex1 is None:
        raise ValueError(f"Conversion {from_es}->{to_es} requires ex1 ({ES_CONVERSIONS[key]})")
    if key in needs_ex2 and ex2 is None:
        raise ValueError(f"Conversion {from_es}->{to_es} requires ex2 ({ES_CONVERSIONS[key]})")

    if key in (("cohendos", "cohend"), ("cohenhos", "cohenh")):
        return es * math.sqrt(2)
    if key == ("cohend", "or"):
        # Chinn (2000) or Borenstein et al. (2009)
        return math.exp(1.81 * es) if ex1 == "chinn" else math.exp(es * math.pi / math.sqrt(3))
    if key == ("cohend", "rb"):
        return es / math.sqrt(es ** 2 + 4)
    if key == ("cohenf", "etasq"):
        return es ** 2 / (1 + es ** 2)
    if key == ("cohenw", "cc"):
        return math.sqrt(es ** 2 / (1 + es ** 2))
    if key == ("cc", "cohenw"):
        return math.sqrt(es ** 2 / (1 - es ** 2))
    if key == ("cramervgof", "cohenw"):
        return es * math.sqrt(ex1 - 1)
    if key == ("epsilonsq", "etasq"):
        return 1 - (1 - es) * (ex1 - ex2) / (ex1 - 1)
    if key == ("epsilonsq", "omegasq"):
        return es * (1 - ex1 / (ex2 + ex1))
    if key == ("etasq", "cohenf"):
        return math.sqrt(es / (1 - es))
    if key == ("etasq", "epsilonsq"):
        return (ex1 * es - ex2 + (1 - es)) / (ex1 - ex2)
    if key == ("jbme", "cohenw"):
        return math.sqrt(es * (1 - ex1) / ex1)
    if key == ("or", "cohend"):
        return math.log(es) / 1.81 if ex1 == "chinn" else math.log(es) * math.sqrt(3) / math.pi
    if key == ("or", "yuleq"):
        return (es - 1) / (es + 1)
    if key == ("or", "yuley"):
        return (math.sqrt(es) - 1) / (math.sqrt(es) + 1)
    if key == ("omegasq", "epsilonsq"):
        return es / (1 - ex1 / (ex2 + ex1))
    if key == ("rb", "cohend"):
        return 2 * es / math.sqrt(1 - es ** 2)
    if key == ("rb", "vda"):
        return (es + 1) / 2
    if key == ("vda", "rb"):
        return 2 * es - 1
    if key == ("yuleq", "or"):
        return (1 + es) / (1 - es)
    if key == ("yuleq", "yuley"):
        return (1 - math.sqrt(1 - es ** 2)) / es
    if key == ("yuley", "or"):
        return ((1 + es) / (1 - es)) ** 2
    # yuley -> yuleq
    return 2 * es / (1 + es ** 2)
